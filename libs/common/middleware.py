"""Observability middleware for FastAPI.

Binds the request ID (taken from ``X-Request-ID`` or generated) to the
logging context, logs one line per finished request and echoes the ID on
the response so callers can correlate their own logs.

Usage:
    from libs.common.middleware import add_observability_middleware

    app = FastAPI()
    add_observability_middleware(app)
"""
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

QUIET_PATHS = frozenset({"/health"})


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
            method=request.method,
        )
        caller = request.headers.get("X-Caller-Service")
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed with unhandled exception",
                extra={
                    "extra_fields": {
                        "error": str(e),
                        "caller": caller,
                        "duration_ms": _elapsed_ms(start),
                    }
                },
            )
            raise
        else:
            if request.url.path not in QUIET_PATHS:
                # 4xx are expected domain outcomes (bad scores, not scored yet)
                level = "warning" if response.status_code >= 500 else "info"
                getattr(logger, level)(
                    f"{request.method} {request.url.path} -> {response.status_code}",
                    extra={
                        "extra_fields": {
                            "status_code": response.status_code,
                            "caller": caller,
                            "duration_ms": _elapsed_ms(start),
                        }
                    },
                )
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_request_context()


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and install the request context middleware."""
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
    logger.info("Observability middleware initialized")
