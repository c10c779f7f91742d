"""
Application Bootstrap
=====================

Startup is a fixed sequence of stages. Each returns its result or raises,
and no stage runs before the previous one succeeded:

1. resolve_configuration  - fetch database credentials and CORS origin
                            (environment or SSM), blocking, once
2. create_database_pool   - build the shared engine, no I/O
3. initialize_schema      - create the visitors table if absent, then
                            run a liveness query
4. routes are mounted by ``create_app`` and uvicorn binds the port only
   after the lifespan startup (stages 2 and 3) completed

Stage 1 failing raises ConfigurationException before the app exists.
Stages 2 and 3 raise StartupException, which aborts uvicorn startup.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from sqlalchemy.engine import URL

from visitor_log.config import Settings, split_origins
from visitor_log.core import ConfigurationException, StartupException
from visitor_log.infrastructure.database import DatabasePool
from visitor_log.infrastructure.parameters import (
    PARAMETER_KEYS,
    ParameterSource,
    build_parameter_source,
)
from visitor_log.shared.infrastructure.logging import get_logger, log_latency

# Registers the visitors table on Base.metadata
from visitor_log.visitors.infrastructure import models  # noqa: F401

logger = get_logger(__name__)


@dataclass(frozen=True)
class RuntimeConfig:
    """Values resolved in stage 1, consumed by the later stages."""
    database_url: Union[str, URL]
    cors_origins: List[str] = field(default_factory=list)


def resolve_configuration(
    settings: Settings,
    source: Optional[ParameterSource] = None
) -> RuntimeConfig:
    """
    Stage 1: resolve database connection values and the CORS origin.

    A ``DATABASE_URL`` in env mode short-circuits the parameter lookup.
    An explicit ``source`` always wins.

    Raises:
        ConfigurationException: a value is missing or unusable
    """
    if source is None and settings.config_source == "env" and settings.database_url:
        logger.info("Using DATABASE_URL from environment")
        return RuntimeConfig(database_url=settings.database_url, cors_origins=settings.cors_origins)

    source = source or build_parameter_source(settings)
    logger.info(
        "Resolving configuration",
        extra={"source": type(source).__name__, "keys": list(PARAMETER_KEYS)}
    )
    values = source.fetch(PARAMETER_KEYS)

    try:
        port = int(values["PGPORT"])
    except ValueError as e:
        raise ConfigurationException(
            f"PGPORT must be an integer, got {values['PGPORT']!r}"
        ) from e

    database_url = URL.create(
        "postgresql+asyncpg",
        username=values["PGUSER"],
        password=values["PGPASSWORD"] or None,
        host=values["PGHOST"],
        port=port,
        database=values["PGDATABASE"],
    )
    return RuntimeConfig(database_url=database_url, cors_origins=split_origins(values["CORS_ORIGIN"]))


def create_database_pool(runtime_config: RuntimeConfig, settings: Settings) -> DatabasePool:
    """Stage 2: build the process-wide pool. Opens no connections."""
    try:
        database = DatabasePool(
            runtime_config.database_url,
            echo=settings.debug,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            ssl_mode=settings.db_ssl_mode,
            ssl_root_cert=settings.db_ssl_root_cert,
        )
    except Exception as e:
        raise StartupException("database_pool", str(e)) from e

    logger.info(
        "Database pool created",
        extra={"url": database.display_url, "ssl_mode": settings.db_ssl_mode}
    )
    return database


async def initialize_schema(database: DatabasePool) -> None:
    """
    Stage 3: create missing tables, then check the database answers.

    Safe to run repeatedly.
    """
    try:
        with log_latency(logger, "schema_init", table="visitors"):
            await database.create_tables()
        server_time = await database.ping()
    except Exception as e:
        logger.error("Database initialization error", extra={"error": str(e)})
        raise StartupException("schema", str(e)) from e

    logger.info("Database connected", extra={"server_time": str(server_time)})
