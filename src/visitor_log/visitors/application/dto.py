"""
Visitors Application DTOs
=========================

Pydantic models for request/response validation.
"""

from typing import Optional

from pydantic import BaseModel, Field

from visitor_log.visitors.domain import Visitor


# ========== Request DTOs ==========

class AddVisitorRequest(BaseModel):
    """
    Request model for adding a visitor.

    ``name`` is optional here so that a missing name reaches the service
    and is reported as 400 "Name is required".
    """
    name: Optional[str] = Field(None, description="Visitor display name")


# ========== Response DTOs ==========

class VisitorResponse(BaseModel):
    """One entry of the visitor list."""
    name: str

    @classmethod
    def from_domain(cls, visitor: Visitor) -> "VisitorResponse":
        return cls(name=visitor.name)


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class OutboundIPResponse(BaseModel):
    """Response model for the outbound connectivity check."""
    message: str
    ip: str
