"""FastAPI dependencies and error envelope helpers."""

from typing import Any, Dict, NoReturn

from fastapi import HTTPException, Request

from coaching.errors import CoachingError

from ..infrastructure.context import CoachContext
from .transformers.frontend_transformer import transform_session

_STATUS_BY_CODE = {
    "CONFIGURATION_REQUIRED": 400,
    "INVALID_REQUEST": 400,
    "AUTHENTICATION_REQUIRED": 401,
    "INVALID_CREDENTIAL": 401,
    "INVALID_STATE": 409,
    "OPERATION_IN_PROGRESS": 409,
    "QUOTA_EXCEEDED": 429,
    "EXTRACTION_FAILED": 502,
    "PERSISTENCE_FAILED": 502,
}


def get_context(request: Request) -> CoachContext:
    return request.app.state.context


def error_detail(code: str, message: str, details: Dict[str, Any] | None = None) -> Dict[str, Any]:
    return {"error": {"code": code, "message": message, "details": details or {}}}


def raise_for_result(result: Any) -> None:
    """Turn a failed use-case result into the HTTP error the frontend understands."""
    if result.success:
        return
    code = result.error_code or "INTERNAL_ERROR"
    details = dict(result.details or {})
    session = getattr(result, "session", None)
    if session:
        details["session"] = transform_session(session)
    raise HTTPException(
        status_code=_STATUS_BY_CODE.get(code, 500),
        detail=error_detail(code, result.error or "Request failed", details),
    )


def raise_internal(e: Exception, action: str) -> NoReturn:
    raise HTTPException(
        status_code=500,
        detail=error_detail("INTERNAL_ERROR", f"Error {action}: {str(e)}"),
    )


def raise_for_error(e: CoachingError) -> NoReturn:
    raise HTTPException(
        status_code=_STATUS_BY_CODE.get(e.code, 500),
        detail=error_detail(e.code, e.user_message, e.details),
    )
