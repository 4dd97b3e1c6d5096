"""Global exception handlers for consistent error responses.

Design:
- AppError subclasses → their own ``status_code`` and ``kind`` tag
- Rate limit errors also carry ``quota_name``, ``retry_after`` and a
  ``Retry-After`` header
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for distributed tracing
"""

import logging
import math
import time

from fastapi import Request
from fastapi.responses import JSONResponse

from trademark_api.core.config import settings
from trademark_api.core.errors import AppError, RateLimitedAppError
from trademark_api.core.logging import get_request_id

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Translate a domain error into the JSON error envelope.

    Response body::

        {"error": {"kind", "code", "message", "request_id",
                   "quota_name"?, "retry_after"?, "details"?}}

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the error's status code.
    """
    status_code = exc.status_code
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_kind": exc.kind,
            "error_code": exc.code,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    error_content: dict = {
        "kind": exc.kind,
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    headers: dict[str, str] = {}

    if isinstance(exc, RateLimitedAppError):
        error_content["quota_name"] = exc.quota_name
        error_content["retry_after"] = exc.retry_after
        if exc.retry_after is not None and settings.app.rate_limit_include_headers:
            wait = (exc.details or {}).get("retry_after_seconds")
            if wait is None:
                wait = exc.retry_after - time.time()
            headers["Retry-After"] = str(max(0, math.ceil(wait)))

    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers or None,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure and returns a generic message; no stack traces or
    exception text reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "kind": "internal_error",
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
