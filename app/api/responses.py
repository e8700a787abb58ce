"""Response envelope shared by every REST handler.

Every body is ``{"success": bool, "data"?, "message"?, "error"?, "count"?}``.
"""
from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.errors import VoiceMentorError


def _encode(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, (list, tuple)):
        return [_encode(item) for item in data]
    return data


def ok(data: Any = None, message: Optional[str] = None, status_code: int = 200, count: Optional[int] = None) -> JSONResponse:
    body = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = _encode(data)
    if count is not None:
        body["count"] = count
    return JSONResponse(status_code=status_code, content=body)


def fail(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return JSONResponse(status_code=status_code, content=body)


def from_error(exc: VoiceMentorError) -> JSONResponse:
    return fail(exc.status_code, exc.message, exc.error)


def internal_error(exc: Exception) -> JSONResponse:
    return fail(500, "Internal server error", str(exc))
