"""Exception handlers for the FastAPI application.

Every error leaves the API in one shape::

    {"error_code": "...", "message": "...", "details": ...}

Not-found profile reads additionally carry ``"data": null`` so clients can
treat "no profile" as an empty result rather than a failure.
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import Settings
from core.exceptions import AppException, ErrorCode

logger = structlog.get_logger()


def error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: Any | None = None,
    **extra: Any,
) -> JSONResponse:
    """Render the standard error body."""
    content: dict[str, Any] = {
        "error_code": error_code,
        "message": message,
        "details": details,
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def _validation_details(exc: RequestValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]


def setup_exception_handlers(app: FastAPI, app_settings: Settings) -> None:
    """Register all exception handlers on the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Render domain errors; backend outages are logged with their cause."""
        if exc.status_code >= 500:
            cause = exc.__cause__
            logger.error(
                "backend_unavailable",
                error_code=exc.error_code.value,
                cause=type(cause).__name__ if cause else None,
            )
        else:
            logger.warning(
                "request_rejected",
                error_code=exc.error_code.value,
                status_code=exc.status_code,
            )

        extra: dict[str, Any] = {}
        if exc.error_code == ErrorCode.PROFILE_NOT_FOUND:
            extra["data"] = None
        return error_response(
            exc.status_code, exc.error_code.value, exc.message, exc.details, **extra
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Wrap framework HTTP errors (unknown routes, bad methods)."""
        return error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report every invalid field at once."""
        return error_response(
            422,
            ErrorCode.VALIDATION_ERROR.value,
            "Request validation failed",
            _validation_details(exc),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Last resort: log with traceback, hide internals in production."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=request_id,
            exc_info=True,
        )

        message = str(exc) if not app_settings.is_production else "An unexpected error occurred"
        return error_response(
            500,
            ErrorCode.INTERNAL_ERROR.value,
            message,
            {"request_id": request_id},
        )
