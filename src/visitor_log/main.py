"""
Visitor Log - Main Application
==============================

REST backend for the visitor log demo.

Endpoints:
- GET  /          health check, plain text, no database access
- GET  /visitors  visitor names, newest first
- POST /visitors  add a visitor
- GET  /check-ip  public IP seen by an external echo service

Startup order (see ``visitor_log.bootstrap``):
configuration -> database pool -> schema -> routes -> listen.
"""

import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from visitor_log.bootstrap import (
    create_database_pool,
    initialize_schema,
    resolve_configuration,
)
from visitor_log.config import Settings, get_settings
from visitor_log.core import ConfigurationException
from visitor_log.infrastructure.parameters import ParameterSource
from visitor_log.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    global_exception_handler,
    request_validation_handler,
)
from visitor_log.shared.infrastructure.logging import get_logger, setup_logging
from visitor_log.visitors.infrastructure import IPEchoClient
from visitor_log.visitors.interfaces import connectivity_router, visitors_router

logger = get_logger(__name__)

HEALTH_MESSAGE = "Backend is running!"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Create the database pool
    2. Create the visitors table and check connectivity
    3. Create the IP echo HTTP client

    SHUTDOWN:
    1. Close the IP echo client
    2. Dispose of database connections
    """
    settings: Settings = app.state.settings

    # === STARTUP ===
    logger.info("Starting Visitor Log", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    database = create_database_pool(app.state.runtime_config, settings)
    try:
        await initialize_schema(database)
    except Exception:
        await database.dispose()
        raise
    app.state.database = database

    app.state.ip_echo_client = IPEchoClient(
        settings.ip_echo_url,
        timeout=settings.ip_echo_timeout_seconds
    )

    logger.info("Visitor Log started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Visitor Log")
    await app.state.ip_echo_client.close()
    await database.dispose()
    logger.info("Visitor Log shutdown complete")


def create_app(
    settings: Optional[Settings] = None,
    parameter_source: Optional[ParameterSource] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Resolves configuration first (blocking, raises ConfigurationException),
    so the CORS origin from the parameter store is known before the
    middleware stack is built.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.environment)

    runtime_config = resolve_configuration(settings, parameter_source)

    app = FastAPI(
        title="Visitor Log API",
        description="Records visitor names and checks outbound connectivity.",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.runtime_config = runtime_config

    # === CORS Middleware ===
    app.add_middleware(
        CORSMiddleware,
        allow_origins=runtime_config.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # === Custom Middleware ===
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # === Health Check Endpoint ===

    @app.get("/", tags=["Health"], response_class=PlainTextResponse)
    async def health_check():
        """Liveness for load balancers. Does not touch the database."""
        return HEALTH_MESSAGE

    # === Include Module Routers ===
    app.include_router(visitors_router)
    app.include_router(connectivity_router)

    return app


def run() -> None:
    """Console entry point: build the app and serve it with uvicorn."""
    import uvicorn

    # Defaults until settings load, so a settings failure is still logged as JSON
    setup_logging()
    try:
        settings = get_settings()
        app = create_app(settings)
    except (ConfigurationException, ValidationError) as e:
        logger.error("Configuration error", extra={"error": str(e)})
        sys.exit(1)

    logger.info("Starting server", extra={"host": settings.host, "port": settings.port})
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        log_level=settings.log_level.lower()
    )


# === Development Entry Point ===

if __name__ == "__main__":
    run()
