"""
Visitor Domain Entities
=======================
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from visitor_log.core import ValidationException

MAX_NAME_LENGTH = 255


def normalize_name(name: Any) -> str:
    """
    Return the stripped visitor name.

    Raises ValidationException when the name is missing, not text, blank
    or longer than the column allows.
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationException("Name is required")
    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationException(
            f"Name is too long (max {MAX_NAME_LENGTH} characters)",
            {"length": len(name)}
        )
    return name


@dataclass(frozen=True)
class Visitor:
    """
    One form submission.

    ``id`` and ``created_at`` are assigned by the database; both are None
    until the row has been inserted.
    """
    id: Optional[int]
    name: str
    created_at: Optional[datetime] = None
