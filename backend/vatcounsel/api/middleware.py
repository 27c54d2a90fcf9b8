"""Middleware for the FastAPI application.

This module contains middleware that process requests and responses, and the
exception handlers that render errors as ``{"success": false, "error": {...}}``.
"""

import time
import traceback
import uuid

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from vatcounsel.core.config import settings
from vatcounsel.core.exceptions import VatCounselException, unpack_validation_error
from vatcounsel.core.logging import logger
from vatcounsel.domains.usage.exceptions import UsageLimitExceededError


def error_response(status_code: int, message: str, code: str, **extra) -> JSONResponse:
    """Build the error envelope shared by every handler."""
    error = {"message": message, "code": code}
    error.update(extra)
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


async def add_request_id(request: Request, call_next: callable) -> Response:
    """Middleware to generate and add a request ID to the request for tracing.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response to the incoming request.

    """
    request.state.request_id = str(uuid.uuid4())
    response = await call_next(request)
    response.headers["X-Request-ID"] = request.state.request_id
    return response


async def log_requests(request: Request, call_next: callable) -> Response:
    """Middleware to log incoming requests.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response to the incoming request.

    """
    start = time.monotonic()
    response = await call_next(request)
    elapsed_ms = (time.monotonic() - start) * 1000

    log = logger.with_context(request_id=getattr(request.state, "request_id", None))
    log.info(
        f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)"
    )
    return response


async def exception_logging_middleware(request: Request, call_next: callable) -> Response:
    """Middleware to log unhandled exceptions.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response to the incoming request.

    """
    try:
        return await call_next(request)
    except Exception as exc:
        logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")

        extra = {}
        # Include stack trace only in development mode
        if settings.DEBUG:
            extra["trace"] = traceback.format_exc()

        return error_response(500, "Internal server error", "INTERNAL_ERROR", **extra)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError | ValidationError
) -> JSONResponse:
    """Render request validation failures as 400 INVALID_REQUEST.

    Args:
    ----
        request (Request): The incoming request that triggered the exception.
        exc (RequestValidationError | ValidationError): The validation error.

    Returns:
    -------
        JSONResponse: A 400 Bad Request response listing the invalid fields.

    """
    if isinstance(exc, ValidationError):
        details = unpack_validation_error(exc)["errors"]
    else:
        details = [
            {".".join(str(loc) for loc in error["loc"]): error["msg"]} for error in exc.errors()
        ]
    return error_response(400, "Invalid request body", "INVALID_REQUEST", details=details)


async def usage_limit_exceeded_exception_handler(
    request: Request, exc: UsageLimitExceededError
) -> JSONResponse:
    """Render an exhausted quota as 429 with the counters the client needs.

    Args:
    ----
        request (Request): The incoming request that triggered the exception.
        exc (UsageLimitExceededError): The exception object that was raised.

    Returns:
    -------
        JSONResponse: A 429 Too Many Requests response.

    """
    return error_response(
        exc.status_code,
        exc.message,
        exc.code,
        used=exc.used,
        limit=exc.limit,
        planKey=exc.plan_key,
    )


async def vatcounsel_exception_handler(request: Request, exc: VatCounselException) -> JSONResponse:
    """Render any VatCounselException with its own status and code.

    Args:
    ----
        request (Request): The incoming request that triggered the exception.
        exc (VatCounselException): The exception object that was raised.

    Returns:
    -------
        JSONResponse: The error envelope with the exception's status code.

    """
    if exc.status_code >= 500:
        logger.with_context(request_id=getattr(request.state, "request_id", None)).error(
            f"{exc.__class__.__name__}: {exc}"
        )
    return error_response(exc.status_code, exc.message, exc.code)
