from typing import Any, TypeVar

from sqlalchemy.orm import Session

T = TypeVar('T')


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db

    def save(self, entity: T) -> T:
        """Add an entity and flush so generated ids are available."""
        self.db.add(entity)
        self.db.flush()
        return entity

    def delete(self, entity: Any) -> None:
        self.db.delete(entity)
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
