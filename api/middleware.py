"""
Consolidated middleware for the Kitchen Hand Guide
"""

import time
import logging
from uuid import uuid4

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse
from sqlalchemy.exc import TimeoutError as PoolCheckoutTimeout
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from api import pages
from app.exceptions import (
    KitchenGuideError,
    AuthenticationFailedError,
    NotFoundError,
    PoolTimeoutError,
    StorageUnavailableError,
)

logger = logging.getLogger("kitchen.middleware")


# ============================================================================
# Request Logging Middleware
# ============================================================================


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all HTTP requests and responses"""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id

        logger.info(
            "request_started request_id=%s method=%s path=%s client=%s",
            request_id,
            request.method,
            request.url.path,
            request.client.host if request.client else None,
        )

        start_time = time.time()

        try:
            response: Response = await call_next(request)
        except Exception:
            process_time = time.time() - start_time
            logger.error(
                "request_failed request_id=%s method=%s path=%s process_time=%.4fs",
                request_id,
                request.method,
                request.url.path,
                process_time,
                exc_info=True,
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            "request_completed request_id=%s method=%s path=%s status=%d process_time=%.4fs",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            process_time,
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response


# ============================================================================
# Error Handlers
# ============================================================================


def _error_response(request: Request, status_code: int, title: str, message: str):
    user = getattr(request.state, "user", None)
    return HTMLResponse(
        pages.error_page(title, message, status_code, user=user),
        status_code=status_code,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle malformed path, query or form parameters"""
    logger.warning("request_invalid path=%s errors=%s", request.url.path, exc.errors())
    return _error_response(
        request, status.HTTP_400_BAD_REQUEST, "Invalid request", "The request could not be processed."
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions, including unknown routes"""
    logger.warning("http_error status=%d path=%s detail=%s", exc.status_code, request.url.path, exc.detail)
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return _error_response(request, exc.status_code, "Page not found", "That page does not exist.")
    return _error_response(request, exc.status_code, f"Error {exc.status_code}", str(exc.detail))


async def kitchen_guide_exception_handler(request: Request, exc: KitchenGuideError):
    """Handle application errors that escaped the route"""
    if isinstance(exc, AuthenticationFailedError):
        logger.info("auth_required path=%s", request.url.path)
        return _error_response(request, exc.http_status, "Login required", exc.message)

    if isinstance(exc, NotFoundError):
        logger.warning("not_found path=%s message=%s", request.url.path, exc.message)
        return _error_response(request, exc.http_status, "Not found", exc.message)

    if isinstance(exc, StorageUnavailableError):
        logger.error("storage_unavailable path=%s message=%s", request.url.path, exc.message)
        return _error_response(
            request, exc.http_status, "Something went wrong", "The image could not be saved. Please try again later."
        )

    if isinstance(exc, PoolTimeoutError):
        logger.error("database_busy path=%s", request.url.path)
        return _error_response(
            request, exc.http_status, "Service busy", "The service is busy. Please try again shortly."
        )

    logger.warning("request_rejected path=%s status=%d message=%s", request.url.path, exc.http_status, exc.message)
    return _error_response(request, exc.http_status, "Request rejected", exc.message)


async def pool_timeout_exception_handler(request: Request, exc: PoolCheckoutTimeout):
    """Handle a connection checkout that timed out outside the session dependency"""
    return await kitchen_guide_exception_handler(request, PoolTimeoutError())


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.exception("unexpected_error path=%s error=%s", request.url.path, exc)
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Something went wrong",
        "An unexpected error occurred",
    )
