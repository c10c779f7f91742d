"""
Visitors Infrastructure Repositories
====================================

SQLAlchemy implementation of the visitor repository.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from visitor_log.core import RepositoryException
from visitor_log.visitors.application import IVisitorRepository
from visitor_log.visitors.domain import Visitor
from visitor_log.visitors.infrastructure.models import VisitorModel


class SQLAlchemyVisitorRepository(IVisitorRepository):
    """SQLAlchemy implementation for visitors."""

    def __init__(self, session: AsyncSession):
        self._session = session

    @staticmethod
    def _to_entity(model: VisitorModel) -> Visitor:
        return Visitor(id=model.id, name=model.name, created_at=model.created_at)

    async def add(self, name: str) -> Visitor:
        """Insert and commit a visitor row."""
        model = VisitorModel(name=name)
        try:
            self._session.add(model)
            await self._session.flush()
            # created_at is a server default, load it before leaving the transaction
            await self._session.refresh(model)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise RepositoryException("Failed to add visitor", {"error": str(e)}) from e

        return self._to_entity(model)

    async def list_all(self) -> List[Visitor]:
        """All visitors, newest first; ties on created_at go to the higher id."""
        stmt = select(VisitorModel).order_by(
            VisitorModel.created_at.desc(),
            VisitorModel.id.desc()
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise RepositoryException("Failed to fetch visitors", {"error": str(e)}) from e

        return [self._to_entity(model) for model in result.scalars().all()]
