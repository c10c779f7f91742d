"""
Visitors Application Services
=============================

Orchestrates visitor persistence and the outbound IP check.
"""

from abc import ABC, abstractmethod
from typing import Any, List

from visitor_log.visitors.domain import Visitor, normalize_name
from visitor_log.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Repository Interfaces ==========

class IVisitorRepository(ABC):
    """Interface for visitor data access."""

    @abstractmethod
    async def add(self, name: str) -> Visitor:
        """Insert a visitor and return it with its id and timestamp."""

    @abstractmethod
    async def list_all(self) -> List[Visitor]:
        """All visitors, most recent first."""


class IPublicIPClient(ABC):
    """Interface for the public IP echo service."""

    @abstractmethod
    async def get_public_ip(self) -> str:
        """Public IP address the echo service saw for this host."""


# ========== Application Services ==========

class VisitorService:
    """Adds and lists visitors."""

    def __init__(self, repository: IVisitorRepository):
        self._repository = repository

    async def add_visitor(self, name: Any) -> Visitor:
        """
        Validate and persist a visitor.

        Raises:
            ValidationException: name missing or blank (nothing is stored)
            RepositoryException: storage failure
        """
        visitor = await self._repository.add(normalize_name(name))
        logger.info("Visitor added", extra={"visitor_id": visitor.id})
        return visitor

    async def list_visitors(self) -> List[Visitor]:
        return await self._repository.list_all()


class ConnectivityService:
    """Reports the public IP this host uses for outbound traffic."""

    def __init__(self, ip_client: IPublicIPClient):
        self._ip_client = ip_client

    async def check_outbound_ip(self) -> str:
        ip = await self._ip_client.get_public_ip()
        logger.info("Outbound call succeeded", extra={"public_ip": ip})
        return ip
