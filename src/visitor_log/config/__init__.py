"""
Configuration Module
====================

Application settings and configuration management using Pydantic.

Database connection values can come from local environment variables
(``config_source=env``) or from AWS SSM Parameter Store
(``config_source=ssm``). Either way they are resolved once at startup,
see ``visitor_log.bootstrap``.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional


ConfigSource = Literal["env", "ssm"]
SSLMode = Literal["disable", "require", "verify-ca", "verify-full"]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The database variables accept both the libpq names (``PGHOST``...)
    and ``DB_*`` names.
    """

    # ========== Application ==========
    app_name: str = Field(default="visitor-log", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port", ge=1, le=65535)

    # ========== Configuration Source ==========
    config_source: ConfigSource = Field(
        default="env",
        description="Where database credentials come from: env or ssm"
    )
    ssm_parameter_prefix: str = Field(
        default="/visitor-log/",
        description="Path prefix of the SSM parameters"
    )
    aws_region: Optional[str] = Field(
        default=None,
        description="AWS region for SSM (boto3 default chain when unset)"
    )

    # ========== Database ==========
    database_url: Optional[str] = Field(
        default=None,
        description="Full async database URL, overrides the individual parts (env source only)"
    )
    db_host: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("db_host", "pghost")
    )
    db_user: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("db_user", "pguser")
    )
    db_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("db_name", "pgdatabase")
    )
    db_password: str = Field(
        default="", validation_alias=AliasChoices("db_password", "pgpassword")
    )
    db_port: int = Field(
        default=5432, ge=1, le=65535, validation_alias=AliasChoices("db_port", "pgport")
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)
    db_ssl_mode: SSLMode = Field(
        default="verify-full",
        description="TLS policy for the database connection"
    )
    db_ssl_root_cert: Optional[Path] = Field(
        default=None,
        description="CA bundle used to verify the database certificate"
    )

    # ========== CORS ==========
    cors_origin: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origin (comma-separated for several)"
    )

    # ========== Outbound Connectivity ==========
    ip_echo_url: str = Field(
        default="https://api.ipify.org?format=json",
        description="Service that echoes the caller's public IP"
    )
    ip_echo_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout for the IP echo call",
        gt=0
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @property
    def cors_origins(self) -> List[str]:
        return split_origins(self.cors_origin)


def split_origins(value: str) -> List[str]:
    """Split a comma-separated origin value, dropping blanks."""
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()
