"""Tests for the startup stages and the application factory."""

import pytest
from sqlalchemy.engine import URL

from visitor_log.bootstrap import RuntimeConfig, create_database_pool, resolve_configuration
from visitor_log.config import Settings
from visitor_log.core import ConfigurationException
from visitor_log.infrastructure.parameters import EnvironmentParameterSource, SSMParameterSource
from visitor_log.main import create_app


def test_database_url_short_circuits_parameter_lookup(settings):
    runtime = resolve_configuration(settings)
    assert runtime.database_url == settings.database_url
    assert runtime.cors_origins == ["http://localhost:3000"]


def test_resolve_from_environment_parts():
    settings = Settings(
        _env_file=None,
        db_host="db.local",
        db_user="postgres",
        db_name="visitors",
        db_password="pw",
        db_port=6543,
        cors_origin="http://a.example, http://b.example",
    )
    runtime = resolve_configuration(settings)

    assert isinstance(runtime.database_url, URL)
    assert runtime.database_url.drivername == "postgresql+asyncpg"
    assert runtime.database_url.host == "db.local"
    assert runtime.database_url.port == 6543
    assert runtime.database_url.database == "visitors"
    assert runtime.database_url.password == "pw"
    assert runtime.cors_origins == ["http://a.example", "http://b.example"]


def test_resolve_empty_password_is_omitted():
    settings = Settings(_env_file=None, db_host="h", db_user="u", db_name="d")
    assert resolve_configuration(settings).database_url.password is None


def test_resolve_from_ssm(ssm_client):
    settings = Settings(_env_file=None, config_source="ssm")
    runtime = resolve_configuration(settings, SSMParameterSource("/visitor-log/", client=ssm_client))

    assert runtime.database_url.host == "db.internal.example"
    assert runtime.database_url.username == "app"
    assert runtime.database_url.password == "s3cret"
    assert runtime.cors_origins == ["https://app.example.com"]


def test_resolve_rejects_bad_port(ssm_client):
    ssm_client.parameters["/visitor-log/PGPORT"] = "fivefourthreetwo"
    with pytest.raises(ConfigurationException):
        resolve_configuration(
            Settings(_env_file=None, config_source="ssm"),
            SSMParameterSource("/visitor-log/", client=ssm_client),
        )


def test_resolve_missing_environment_is_fatal():
    with pytest.raises(ConfigurationException):
        resolve_configuration(Settings(_env_file=None))


def test_explicit_source_wins_over_database_url(settings):
    source = EnvironmentParameterSource(
        Settings(_env_file=None, db_host="h", db_user="u", db_name="d")
    )
    runtime = resolve_configuration(settings, source)
    assert runtime.database_url.host == "h"


def test_create_database_pool_uses_settings(settings):
    database = create_database_pool(
        RuntimeConfig(database_url="postgresql+asyncpg://u@h/d"),
        settings.model_copy(update={"db_pool_size": 2, "db_ssl_mode": "disable"}),
    )
    assert database.engine.sync_engine.pool.size() == 2


def test_create_app_fails_before_building_app_without_config():
    with pytest.raises(ConfigurationException):
        create_app(Settings(_env_file=None))


def test_create_app_takes_cors_origin_from_ssm(ssm_client):
    settings = Settings(_env_file=None, config_source="ssm")
    app = create_app(settings, SSMParameterSource("/visitor-log/", client=ssm_client))

    assert app.state.runtime_config.cors_origins == ["https://app.example.com"]
    assert app.state.settings is settings
    # Stage 1 only: the pool is built by the lifespan
    assert not hasattr(app.state, "database")
    assert len(ssm_client.calls) == 1
