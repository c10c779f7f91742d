"""
Visitors Domain Layer
=====================

Framework-agnostic visitor entity and name rules.
"""

from visitor_log.visitors.domain.entities import Visitor, normalize_name

__all__ = [
    "Visitor",
    "normalize_name",
]
