"""Shared pytest fixtures and test helpers for visitor_log tests."""

from pathlib import Path
from typing import Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient

from visitor_log.bootstrap import initialize_schema
from visitor_log.config import Settings
from visitor_log.infrastructure.database import DatabasePool
from visitor_log.main import create_app
from visitor_log.visitors.infrastructure import IPEchoClient
from visitor_log.visitors.interfaces.controllers import get_public_ip_client

ECHO_URL = "https://echo.test/?format=json"

CONFIG_ENV_VARS = (
    "PGHOST", "PGUSER", "PGDATABASE", "PGPASSWORD", "PGPORT",
    "DB_HOST", "DB_USER", "DB_NAME", "DB_PASSWORD", "DB_PORT",
    "DATABASE_URL", "CONFIG_SOURCE", "CORS_ORIGIN", "ENVIRONMENT",
    "DB_SSL_MODE", "SSM_PARAMETER_PREFIX", "IP_ECHO_URL", "LOG_LEVEL",
    "HOST", "PORT", "AWS_REGION",
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell configuration out of the tests."""
    for var in CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Development settings on a temporary SQLite database."""
    return Settings(
        _env_file=None,
        database_url=sqlite_url(tmp_path / "visitors.db"),
        environment="development",
        ip_echo_url=ECHO_URL,
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client with the lifespan (pool + schema) started."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def use_echo(app: FastAPI) -> Callable[[Callable[[httpx.Request], httpx.Response]], IPEchoClient]:
    """Route /check-ip through an httpx.MockTransport handler."""

    def _use(handler: Callable[[httpx.Request], httpx.Response]) -> IPEchoClient:
        echo_client = IPEchoClient(ECHO_URL, transport=httpx.MockTransport(handler))
        app.dependency_overrides[get_public_ip_client] = lambda: echo_client
        return echo_client

    return _use


@pytest_asyncio.fixture
async def database(tmp_path: Path) -> DatabasePool:
    """Initialized SQLite pool with the visitors table created."""
    db = DatabasePool(sqlite_url(tmp_path / "visitors.db"))
    await initialize_schema(db)
    try:
        yield db
    finally:
        await db.dispose()


class FakeSSMClient:
    """Stands in for ``boto3.client("ssm")``; records every call."""

    def __init__(self, parameters: Dict[str, str], error: Optional[Exception] = None):
        self.parameters = parameters
        self.error = error
        self.calls: List[dict] = []

    def get_parameters(self, Names: List[str], WithDecryption: bool = False) -> dict:
        self.calls.append({"Names": list(Names), "WithDecryption": WithDecryption})
        if self.error is not None:
            raise self.error
        return {
            "Parameters": [
                {"Name": name, "Type": "SecureString", "Value": self.parameters[name]}
                for name in Names if name in self.parameters
            ],
            "InvalidParameters": [name for name in Names if name not in self.parameters],
        }


@pytest.fixture
def ssm_parameters() -> Dict[str, str]:
    return {
        "/visitor-log/PGHOST": "db.internal.example",
        "/visitor-log/PGUSER": "app",
        "/visitor-log/PGDATABASE": "visitors",
        "/visitor-log/PGPASSWORD": "s3cret",
        "/visitor-log/PGPORT": "5432",
        "/visitor-log/CORS_ORIGIN": "https://app.example.com",
    }


@pytest.fixture
def ssm_client(ssm_parameters: Dict[str, str]) -> FakeSSMClient:
    return FakeSSMClient(ssm_parameters)
