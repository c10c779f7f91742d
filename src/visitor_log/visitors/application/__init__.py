"""
Visitors Application Layer
==========================

Contains:
- Services: business logic orchestration
- DTOs: request/response models
- Interfaces implemented by the infrastructure layer
"""

from visitor_log.visitors.application.dto import (
    AddVisitorRequest,
    VisitorResponse,
    MessageResponse,
    ErrorResponse,
    OutboundIPResponse,
)
from visitor_log.visitors.application.services import (
    VisitorService,
    ConnectivityService,
    IVisitorRepository,
    IPublicIPClient,
)

__all__ = [
    # DTOs
    "AddVisitorRequest",
    "VisitorResponse",
    "MessageResponse",
    "ErrorResponse",
    "OutboundIPResponse",
    # Services
    "VisitorService",
    "ConnectivityService",
    # Interfaces
    "IVisitorRepository",
    "IPublicIPClient",
]
