"""
Visitors External Service Adapters
==================================

HTTP client for the public IP echo service used by the connectivity check.
"""

from typing import Optional

import httpx

from visitor_log.core import ExternalServiceException
from visitor_log.visitors.application import IPublicIPClient
from visitor_log.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class IPEchoClient(IPublicIPClient):
    """
    Client for an ipify-style echo service returning ``{"ip": "..."}``.

    One ``httpx.AsyncClient`` is shared by all requests and closed at
    application shutdown. Failures are not retried.
    """

    SERVICE_NAME = "IP Echo"

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._url = url
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def get_public_ip(self) -> str:
        """
        Call the echo service.

        Raises:
            ExternalServiceException: network error, timeout, non-2xx status
                or a reply without an ``ip`` field
        """
        try:
            response = await self._http_client.get(self._url)
            response.raise_for_status()
            ip = response.json()["ip"]
        except httpx.HTTPError as e:
            logger.error("IP echo request failed", extra={"url": self._url, "error": str(e)})
            raise ExternalServiceException(self.SERVICE_NAME, str(e)) from e
        except (ValueError, KeyError, TypeError) as e:
            logger.error("IP echo reply malformed", extra={"url": self._url, "error": repr(e)})
            raise ExternalServiceException(self.SERVICE_NAME, "Malformed reply") from e

        if not isinstance(ip, str) or not ip:
            raise ExternalServiceException(self.SERVICE_NAME, "Malformed reply")
        return ip

    async def close(self) -> None:
        """Close HTTP client."""
        await self._http_client.aclose()
