from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from hrms.repositories.tables import RecordState

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Session-bound repository whose reads see live (non-deleted) rows only.

    Soft-deletable models are filtered on ``record_state`` here so call
    sites never repeat the condition.
    """

    model: type[ModelType]

    def __init__(self, session: Session) -> None:
        self.session = session

    @property
    def soft_deletable(self) -> bool:
        return hasattr(self.model, "record_state")

    def live(self, *criteria: Any) -> Select:
        stmt = select(self.model)
        if self.soft_deletable:
            stmt = stmt.where(self.model.record_state == RecordState.ACTIVE)
        if criteria:
            stmt = stmt.where(*criteria)
        return stmt

    def get(self, entity_id: Any) -> Optional[ModelType]:
        entity = self.session.get(self.model, entity_id)
        if entity is None:
            return None
        if self.soft_deletable and entity.record_state != RecordState.ACTIVE:
            return None
        return entity

    def add(self, entity: ModelType) -> ModelType:
        self.session.add(entity)
        self.session.flush()
        return entity
