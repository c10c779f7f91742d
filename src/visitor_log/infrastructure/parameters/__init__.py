"""
Configuration Parameter Sources
===============================

Resolve the named values the application needs before anything else is
built: database host, user, name, password, port and the allowed CORS
origin.

Two interchangeable sources:
- EnvironmentParameterSource: values already loaded into ``Settings``
- SSMParameterSource: AWS SSM Parameter Store, decrypted, via boto3

Both return a mapping from short key (``PGHOST``) to value and raise
ConfigurationException when any requested key cannot be resolved.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from visitor_log.config import Settings
from visitor_log.core import ConfigurationException
from visitor_log.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

PARAMETER_KEYS = ("PGHOST", "PGUSER", "PGDATABASE", "PGPASSWORD", "PGPORT", "CORS_ORIGIN")


def short_key(name: str) -> str:
    """Last path segment of a parameter name: ``/app/db/PGHOST`` -> ``PGHOST``."""
    return name.rstrip("/").rsplit("/", 1)[-1]


class ParameterSource(ABC):
    """Interface for startup configuration sources."""

    @abstractmethod
    def fetch(self, keys: Sequence[str]) -> Dict[str, str]:
        """Return ``{key: value}`` for every key, or raise ConfigurationException."""


class EnvironmentParameterSource(ParameterSource):
    """Reads the parameters from local environment variables (through Settings)."""

    def __init__(self, settings: Settings):
        self._values = {
            "PGHOST": settings.db_host,
            "PGUSER": settings.db_user,
            "PGDATABASE": settings.db_name,
            "PGPASSWORD": settings.db_password,
            "PGPORT": str(settings.db_port),
            "CORS_ORIGIN": settings.cors_origin,
        }

    def fetch(self, keys: Sequence[str]) -> Dict[str, str]:
        # An empty password is allowed, libpq accepts it for trust auth
        missing = [
            key for key in keys
            if self._values.get(key) is None or (self._values[key] == "" and key != "PGPASSWORD")
        ]
        if missing:
            raise ConfigurationException(
                f"Missing required environment variables: {', '.join(missing)}",
                {"missing": missing}
            )
        return {key: self._values[key] for key in keys}


class SSMParameterSource(ParameterSource):
    """
    Fetches SecureString/String parameters from AWS SSM Parameter Store.

    Names are ``<prefix><key>``. SSM accepts at most ten names per
    ``GetParameters`` call, so larger sets are fetched in batches.
    """

    MAX_NAMES_PER_CALL = 10

    def __init__(
        self,
        prefix: str,
        client: Optional[Any] = None,
        region_name: Optional[str] = None
    ):
        self._prefix = prefix if prefix.endswith("/") else f"{prefix}/"
        if client is None:
            try:
                client = boto3.client("ssm", region_name=region_name)
            except BotoCoreError as e:
                raise ConfigurationException(
                    "Could not create SSM client",
                    {"error": str(e)}
                ) from e
        self._client = client

    def parameter_name(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def fetch(self, keys: Sequence[str]) -> Dict[str, str]:
        names = [self.parameter_name(key) for key in keys]
        values: Dict[str, str] = {}
        invalid: List[str] = []

        for start in range(0, len(names), self.MAX_NAMES_PER_CALL):
            batch = names[start:start + self.MAX_NAMES_PER_CALL]
            try:
                response = self._client.get_parameters(Names=batch, WithDecryption=True)
            except (BotoCoreError, ClientError) as e:
                raise ConfigurationException(
                    "Failed to fetch parameters from SSM",
                    {"error": str(e), "names": batch}
                ) from e

            for parameter in response.get("Parameters", []):
                values[short_key(parameter["Name"])] = parameter["Value"]
            invalid.extend(response.get("InvalidParameters", []))

        missing = [name for name, key in zip(names, keys) if key not in values]
        if missing:
            raise ConfigurationException(
                f"Missing required parameters: {', '.join(missing)}",
                {"missing": missing, "invalid": invalid}
            )

        logger.info("Fetched parameters from SSM", extra={"parameter_count": len(names)})
        return {key: values[key] for key in keys}


def build_parameter_source(settings: Settings) -> ParameterSource:
    """Pick the parameter source named by ``settings.config_source``."""
    if settings.config_source == "ssm":
        return SSMParameterSource(settings.ssm_parameter_prefix, region_name=settings.aws_region)
    return EnvironmentParameterSource(settings)
