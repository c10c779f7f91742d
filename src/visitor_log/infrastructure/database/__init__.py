"""
Database Infrastructure
=======================

Manages the database engine, session lifecycle and TLS policy.

Uses SQLAlchemy 2.0 with asyncpg for async PostgreSQL operations. One
``DatabasePool`` exists per process; it is stored on ``app.state`` and
handed to request handlers through ``get_session``.
"""

import ssl
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional, Union

from fastapi import Request
from sqlalchemy import func, select
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    SQLAlchemy 2.0 style using DeclarativeBase.
    """
    pass


def build_ssl_context(ssl_mode: str, root_cert: Optional[Path] = None) -> Union[ssl.SSLContext, bool]:
    """
    Build the asyncpg ``ssl`` argument for a libpq-style ssl mode.

    ``require`` encrypts without checking the certificate and must be
    chosen explicitly; ``verify-full`` is the default.
    """
    if ssl_mode == "disable":
        return False

    context = ssl.create_default_context(cafile=str(root_cert) if root_cert else None)
    if ssl_mode == "require":
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    elif ssl_mode == "verify-ca":
        context.check_hostname = False
    elif ssl_mode != "verify-full":
        raise ValueError(f"Unknown ssl mode: {ssl_mode}")
    return context


class DatabasePool:
    """
    Process-wide engine plus session factory.

    Construction does no I/O; connections are opened lazily by the pool.
    """

    def __init__(
        self,
        url: Union[str, URL],
        *,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
        ssl_mode: str = "verify-full",
        ssl_root_cert: Optional[Path] = None,
    ):
        self.url = make_url(url)

        engine_kwargs: Dict[str, Any] = {
            "echo": echo,
            "pool_pre_ping": True,  # Verify connections before using
        }
        if self.url.get_backend_name() == "postgresql":
            engine_kwargs["pool_size"] = pool_size
            engine_kwargs["max_overflow"] = max_overflow
            engine_kwargs["connect_args"] = {"ssl": build_ssl_context(ssl_mode, ssl_root_cert)}

        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)
        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Prevent lazy loading after commit
            autoflush=False,
        )

    @property
    def display_url(self) -> str:
        """Connection URL with the password masked, for logs."""
        return self.url.render_as_string(hide_password=True)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Async context manager for database sessions.

        Commits on clean exit and rolls back on error.

        Usage:
            async with database.session() as session:
                result = await session.execute(select(VisitorModel))
        """
        async with self.session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """Create all tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> Any:
        """Run a trivial query and return the server's current time."""
        async with self.engine.connect() as conn:
            result = await conn.execute(select(func.current_timestamp()))
            return result.scalar_one()

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a session from the application's pool.

    Usage in FastAPI:
        @router.get("/visitors")
        async def list_visitors(session: AsyncSession = Depends(get_session)):
            ...
    """
    database: Optional[DatabasePool] = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database not initialized. Application startup has not run.")

    async with database.session() as session:
        yield session
