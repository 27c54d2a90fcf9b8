"""Main module of the FastAPI application.

This module sets up the FastAPI application and the middleware to log incoming requests
and unhandled exceptions.
"""

import os
import subprocess
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from vatcounsel.api.middleware import (
    add_request_id,
    exception_logging_middleware,
    log_requests,
    usage_limit_exceeded_exception_handler,
    validation_exception_handler,
    vatcounsel_exception_handler,
)
from vatcounsel.api.v1.api import api_router
from vatcounsel.core.config import settings
from vatcounsel.core.exceptions import VatCounselException
from vatcounsel.core.logging import logger
from vatcounsel.domains.usage.exceptions import UsageLimitExceededError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events.

    Initializes the DI container and runs alembic migrations when enabled.
    """
    from vatcounsel.core.container import initialize_container, reset_container

    logger.info("Initializing dependency injection container...")
    initialize_container(settings)
    logger.info("Container initialized successfully")

    if settings.RUN_ALEMBIC_MIGRATIONS:
        logger.info("Running alembic migrations...")
        env = os.environ.copy()
        backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        env["PYTHONPATH"] = backend_dir
        subprocess.run(
            [sys.executable, "-m", "alembic", "upgrade", "heads"],
            check=True,
            cwd=backend_dir,
            env=env,
        )

    yield

    reset_container()


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.include_router(api_router)

# Middleware, the last one registered runs first
app.middleware("http")(log_requests)
app.middleware("http")(add_request_id)
app.middleware("http")(exception_logging_middleware)

app.exception_handler(RequestValidationError)(validation_exception_handler)
app.exception_handler(ValidationError)(validation_exception_handler)
app.exception_handler(UsageLimitExceededError)(usage_limit_exceeded_exception_handler)
# Catch-all for the remaining VatCounselException subclasses
app.exception_handler(VatCounselException)(vatcounsel_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.SITE_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
