"""Consistent JSON error responses for FastAPI services.

Usage:
    from libs.common.error_handler import add_exception_handlers

    app = FastAPI()
    add_exception_handlers(app, ScoringError)

Domain errors passed in must expose ``status_code`` and ``to_dict()``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from libs.common.logging import get_logger, get_request_id

logger = get_logger(__name__)


def add_exception_handlers(app: FastAPI, *domain_errors: type[Exception]) -> None:
    """Register handlers for the given domain error types plus a catch-all."""

    async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
        status_code = getattr(exc, "status_code", 400)
        if status_code >= 500:
            logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc}")
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    for error_type in domain_errors:
        app.add_exception_handler(error_type, domain_error_handler)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            extra={
                "extra_fields": {
                    "path": request.url.path,
                    "method": request.method,
                    "error": str(exc),
                }
            },
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "code": "internal_error",
                "request_id": get_request_id(),
            },
        )
