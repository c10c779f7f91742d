"""
Shared API Middleware
======================

Common middleware and exception handlers for the FastAPI application.

Error responses use the ``{"error": ...}`` body shape. The underlying
error message is added as ``details`` only in development.
"""

import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from visitor_log.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
DEFAULT_VALIDATION_MESSAGE = "Invalid request body"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Adds correlation ID to requests for tracing.

    An incoming ``X-Correlation-ID`` header is reused, otherwise a new one
    is generated. Either way it is echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER, str(uuid.uuid4()))
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs all requests and responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = getattr(request.state, "correlation_id", "unknown")
        start_time = time.perf_counter()

        logger.info(
            "Request started",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.url.path,
                "client": request.client.host if request.client else None
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    "correlation_id": correlation_id,
                    "method": request.method,
                    "path": request.url.path,
                    "error": str(e),
                    "response_time_ms": int((time.perf_counter() - start_time) * 1000)
                }
            )
            raise

        logger.info(
            "Request completed",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "response_time_ms": int((time.perf_counter() - start_time) * 1000)
            }
        )
        return response


def _is_development(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return getattr(settings, "environment", None) == "development"


def error_response(
    request: Request,
    status_code: int,
    error: str,
    exc: Optional[BaseException] = None
) -> JSONResponse:
    """Build an ``{"error": ...}`` response, with details in development."""
    content = {"error": error}
    if exc is not None and _is_development(request):
        content["details"] = str(exc)
    return JSONResponse(status_code=status_code, content=content)


def validation_error_message(message: str) -> Callable:
    """
    Route decorator setting the 400 message for a body that fails validation.

    Apply it below the router decorator so the registered endpoint carries it.
    """
    def decorator(endpoint: Callable) -> Callable:
        endpoint.validation_error_message = message
        return endpoint
    return decorator


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are caller errors, reported as 400."""
    logger.info(
        "Request validation failed",
        extra={
            "correlation_id": getattr(request.state, "correlation_id", "unknown"),
            "path": request.url.path,
            "errors": len(exc.errors())
        }
    )
    message = getattr(
        request.scope.get("endpoint"),
        "validation_error_message",
        DEFAULT_VALIDATION_MESSAGE
    )
    return error_response(request, status.HTTP_400_BAD_REQUEST, message)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled exceptions.

    Returns the same generic error body the routes use. This response is
    sent outside CorrelationIDMiddleware, so the header is set here.
    """
    correlation_id = (
        getattr(request.state, "correlation_id", None)
        or request.headers.get(CORRELATION_HEADER)
        or str(uuid.uuid4())
    )
    logger.error(
        "Unhandled exception",
        extra={
            "correlation_id": correlation_id,
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error_message": str(exc)
        }
    )
    response = error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", exc)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response
