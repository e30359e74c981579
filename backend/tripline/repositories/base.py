from __future__ import annotations

from typing import Generic, TypeVar

from sqlalchemy.orm import Session
from tripline.models import Base

RecordT = TypeVar("RecordT", bound=Base)


class BaseRepository(Generic[RecordT]):
    """Session holder with the primary-key lookups shared by all records."""

    model: type[RecordT]

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, record_id: str) -> RecordT | None:
        return self.session.get(self.model, record_id)

    def add(self, record: RecordT) -> RecordT:
        return self._save(record)

    def _save(self, record: RecordT) -> RecordT:
        self.session.add(record)
        self.session.flush()
        return record
