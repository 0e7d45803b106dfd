"""
Response Mapper

Maps outcomes to HTTP semantics with a uniform JSON envelope:

- success: ``{"data": ...}`` (lists add ``"pagination"``)
- failure: ``{"error": "...", "missing": [...]}`` (``missing`` only for
  validation failures with absent required fields)
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gym_portal.config import logger
from gym_portal.core.auth import AuthenticationError, AuthorizationError
from gym_portal.core.repositories.exceptions import (
    ConflictError,
    NotFoundError,
    RepositoryError,
)
from gym_portal.core.security import ValidationError, get_request_id

MISSING_FIELDS_MESSAGE = "Missing required fields"

# Most specific first
ERROR_STATUS: Tuple[Tuple[Type[Exception], int], ...] = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (RepositoryError, 500),
)


def status_for(exc: Exception) -> int:
    for exc_type, status_code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status_code
    return 500


def error_body(message: str, missing: Optional[List[str]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": message}
    if missing:
        body["missing"] = missing
    return body


def error_response(message: str, status_code: int = 400, missing: Optional[List[str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(message, missing))


def _clean_message(err: Dict[str, Any]) -> str:
    """Human-readable message for one pydantic error entry."""
    msg = str(err.get("msg", "Invalid value"))
    if err.get("type") == "value_error":
        # Messages raised by our validators are already client-facing
        return msg.removeprefix("Value error, ")
    loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
    return f"{'.'.join(loc)}: {msg}" if loc else msg


def validation_error_body(errors: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Aggregate pydantic errors into a single 400 body.

    Absent required fields are listed under ``missing``; every other violation
    message is joined into ``error``.
    """
    missing: List[str] = []
    messages: List[str] = []

    for err in errors:
        loc = tuple(err.get("loc", ()))
        if err.get("type") == "missing":
            if loc == ("body",):
                messages.append("Request body is required")
            else:
                missing.append(str(loc[-1]))
            continue
        message = _clean_message(err)
        if message not in messages:
            messages.append(message)

    if missing:
        return error_body("; ".join([MISSING_FIELDS_MESSAGE] + messages), missing)
    return error_body("; ".join(messages) or "Invalid request")


def _log_failure(request: Request, status_code: int, message: str) -> None:
    request_id = get_request_id(request)
    if status_code >= 500:
        logger.error(
            "%s %s failed: status=%d error=%s request_id=%s",
            request.method, request.url.path, status_code, message, request_id,
        )
    else:
        logger.info(
            "%s %s rejected: status=%d error=%s request_id=%s",
            request.method, request.url.path, status_code, message, request_id,
        )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers translating every known failure into the envelope."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        body = validation_error_body(exc.errors())
        _log_failure(request, 400, body["error"])
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        if exc.missing:
            body = error_body(MISSING_FIELDS_MESSAGE, exc.missing)
        else:
            body = error_body(exc.message)
        _log_failure(request, 400, body["error"])
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(AuthenticationError)
    @app.exception_handler(AuthorizationError)
    @app.exception_handler(RepositoryError)
    async def domain_error_handler(request: Request, exc: Exception):
        status_code = status_for(exc)
        message = getattr(exc, "message", None) or "Internal server error"
        _log_failure(request, status_code, message)
        return error_response(message, status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions with the same envelope."""
        _log_failure(request, exc.status_code, str(exc.detail))
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )
