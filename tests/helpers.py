# tests/helpers.py

from __future__ import annotations

DEFAULT_PASSWORD = "Secret1x"


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
