"""
Session-bound data access shared by the dormtrack repositories.

Repositories never commit; the unit of work that owns the session
decides when a transaction ends.
"""

import logging
from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from dormtrack.models.base import BaseModel

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """Queries for one model class within the caller's transaction."""

    def __init__(self, model: Type[ModelType], session: Session):
        self.model = model
        self.session = session

    def create(self, entity: ModelType) -> ModelType:
        """Add ``entity`` and flush so generated values are populated."""
        self.session.add(entity)
        self.session.flush()
        logger.debug("Created %s with id: %s", self.model.__name__, entity.id)
        return entity

    def find_by_id(self, id: str, refresh: bool = False) -> Optional[ModelType]:
        """Primary-key lookup; ``refresh`` reloads a row already in the identity map."""
        return self.session.get(self.model, id, populate_existing=refresh)

    def exists(self, id: str) -> bool:
        stmt = select(self.model.id).where(self.model.id == id)
        return self.session.execute(stmt).first() is not None

    def count(self, *criteria: Any) -> int:
        stmt = select(func.count()).select_from(self.model)
        if criteria:
            stmt = stmt.where(*criteria)
        return self.session.execute(stmt).scalar_one()
