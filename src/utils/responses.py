"""
Response envelope for the Task Tracker API

Every response body has the shape {success, message?, data?, errors?}.
"""
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(
    success: bool,
    message: Optional[str] = None,
    data: Any = None,
    errors: Optional[List[Dict[str, str]]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": success}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if errors is not None:
        body["errors"] = errors
    body.update(extra)
    return jsonable_encoder(body)


def success_response(data: Any = None, message: Optional[str] = None, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope(True, message=message, data=data))


def error_response(
    status_code: int,
    message: str,
    errors: Optional[List[Dict[str, str]]] = None,
    **extra: Any,
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope(False, message=message, errors=errors, **extra))


__all__ = ["envelope", "success_response", "error_response"]
