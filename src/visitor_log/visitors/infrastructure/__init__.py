"""
Visitors Infrastructure Layer
=============================

Contains:
- Models: SQLAlchemy ORM models
- Repositories: data access implementations
- External: the IP echo HTTP client
"""

from visitor_log.visitors.infrastructure.models import VisitorModel
from visitor_log.visitors.infrastructure.repositories import SQLAlchemyVisitorRepository
from visitor_log.visitors.infrastructure.external import IPEchoClient

__all__ = [
    "VisitorModel",
    "SQLAlchemyVisitorRepository",
    "IPEchoClient",
]
