"""
Visitors Controllers (API Routes)
=================================

FastAPI routes for the visitor log and the outbound connectivity check.

Controllers are thin - they delegate to application services and turn
application exceptions into ``{"error": ...}`` responses.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from visitor_log.core import ExternalServiceException, RepositoryException, ValidationException
from visitor_log.infrastructure.database import get_session
from visitor_log.shared.api.middleware import error_response, validation_error_message
from visitor_log.shared.infrastructure.logging import get_logger
from visitor_log.visitors.application import (
    AddVisitorRequest,
    ConnectivityService,
    ErrorResponse,
    IPublicIPClient,
    MessageResponse,
    OutboundIPResponse,
    VisitorResponse,
    VisitorService,
)
from visitor_log.visitors.infrastructure import SQLAlchemyVisitorRepository

logger = get_logger(__name__)

visitors_router = APIRouter(prefix="/visitors", tags=["Visitors"])
connectivity_router = APIRouter(tags=["Connectivity"])

OUTBOUND_SUCCESS_MESSAGE = "Outbound call successful! This is the public IP of the server."


# ========== Dependencies ==========

def get_visitor_service(session: AsyncSession = Depends(get_session)) -> VisitorService:
    """Visitor service bound to a request-scoped session."""
    return VisitorService(SQLAlchemyVisitorRepository(session))


def get_public_ip_client(request: Request) -> IPublicIPClient:
    """Shared IP echo client created at startup."""
    return request.app.state.ip_echo_client


def get_connectivity_service(
    ip_client: IPublicIPClient = Depends(get_public_ip_client)
) -> ConnectivityService:
    return ConnectivityService(ip_client)


# ========== Route Handlers ==========

@visitors_router.get(
    "",
    response_model=List[VisitorResponse],
    summary="List visitors, newest first",
    responses={500: {"model": ErrorResponse, "description": "Storage failure"}}
)
async def list_visitors(
    request: Request,
    service: VisitorService = Depends(get_visitor_service)
):
    try:
        visitors = await service.list_visitors()
    except RepositoryException as e:
        logger.error(
            "Error fetching visitors",
            extra={
                "correlation_id": getattr(request.state, "correlation_id", "unknown"),
                "error": e.details.get("error", e.message)
            }
        )
        return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", e)

    return [VisitorResponse.from_domain(visitor) for visitor in visitors]


@visitors_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    summary="Add a visitor",
    responses={
        400: {"model": ErrorResponse, "description": "Name missing, empty or not a string"},
        500: {"model": ErrorResponse, "description": "Storage failure"}
    }
)
@validation_error_message("Name is required")
async def add_visitor(
    request: Request,
    payload: Optional[AddVisitorRequest] = None,
    service: VisitorService = Depends(get_visitor_service)
):
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    try:
        await service.add_visitor(payload.name if payload else None)
    except ValidationException as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": e.message})
    except RepositoryException as e:
        logger.error(
            "Error adding visitor",
            extra={"correlation_id": correlation_id, "error": e.details.get("error", e.message)}
        )
        return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", e)

    return MessageResponse(message="Visitor added successfully")


@connectivity_router.get(
    "/check-ip",
    response_model=OutboundIPResponse,
    summary="Check outbound connectivity",
    description="Calls a public IP echo service and returns the address it saw, "
                "i.e. the NAT/egress IP of this server.",
    responses={500: {"model": ErrorResponse, "description": "Outbound call failed"}}
)
async def check_ip(
    request: Request,
    service: ConnectivityService = Depends(get_connectivity_service)
):
    try:
        ip = await service.check_outbound_ip()
    except ExternalServiceException as e:
        logger.error(
            "Error checking IP",
            extra={
                "correlation_id": getattr(request.state, "correlation_id", "unknown"),
                "error": e.message
            }
        )
        return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to make outbound call", e)

    return OutboundIPResponse(message=OUTBOUND_SUCCESS_MESSAGE, ip=ip)
