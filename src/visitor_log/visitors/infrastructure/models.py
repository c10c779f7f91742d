"""
Visitors Infrastructure Models
==============================

SQLAlchemy ORM models for the visitors module.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from visitor_log.infrastructure.database import Base


class VisitorModel(Base):
    """
    Database model for the Visitor entity.

    ``created_at`` is filled in by the database, never by the caller.
    """
    __tablename__ = "visitors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.current_timestamp()
    )
