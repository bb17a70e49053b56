"""
Credential hashing helpers
Passwords use bcrypt; reset tokens use a fast SHA-256 digest since they are high-entropy
"""
import hashlib
import secrets

import bcrypt

RESET_TOKEN_BYTES = 32
BCRYPT_MAX_BYTES = 72


def _encode_password(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes and newer releases reject longer input
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 10) -> str:
    """Hash a password with a fresh bcrypt salt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_encode_password(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a password against a stored bcrypt hash. A missing hash never matches."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode_password(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def generate_reset_token() -> str:
    """Random reset token, hex encoded."""
    return secrets.token_hex(RESET_TOKEN_BYTES)


def hash_reset_token(raw_token: str) -> str:
    """SHA-256 hex digest of a raw reset token."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


__all__ = [
    "hash_password",
    "verify_password",
    "generate_reset_token",
    "hash_reset_token",
]
