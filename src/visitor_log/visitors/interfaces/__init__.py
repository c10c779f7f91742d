"""
Visitors Interfaces Layer
=========================

FastAPI route handlers for the visitors module.
"""

from visitor_log.visitors.interfaces.controllers import visitors_router, connectivity_router

__all__ = ["visitors_router", "connectivity_router"]
