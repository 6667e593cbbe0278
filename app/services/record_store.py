"""CRUD access to the recordings table."""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.recording import PORTAL_SENTINEL_NAME, Recording


class RecordStoreError(RuntimeError):
    """Raised when a database call fails."""


class RecordStore:
    """Single-table store shared by recordings and the portal sentinel row."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def insert(self, name: str, url: str) -> Recording:
        row = Recording(name=name, url=url)
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RecordStoreError(f"Insert failed: {e}") from e
        return row

    def get(self, record_id: int) -> Recording | None:
        try:
            return self.db.query(Recording).filter(Recording.id == record_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RecordStoreError(f"Select failed: {e}") from e

    def find_by_name(self, name: str) -> Recording | None:
        """Newest row with the given name."""
        try:
            return (
                self.db.query(Recording)
                .filter(Recording.name == name)
                .order_by(Recording.created_at.desc(), Recording.id.desc())
                .first()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RecordStoreError(f"Select failed: {e}") from e

    def list_recordings(self) -> list[Recording]:
        """All recordings except the portal sentinel, newest first."""
        try:
            return (
                self.db.query(Recording)
                .filter(Recording.name != PORTAL_SENTINEL_NAME)
                .order_by(Recording.created_at.desc(), Recording.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RecordStoreError(f"Select failed: {e}") from e

    def delete(self, record_id: int) -> bool:
        """Delete a row by id. Returns False if it did not exist."""
        try:
            deleted = self.db.query(Recording).filter(Recording.id == record_id).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RecordStoreError(f"Delete failed: {e}") from e
        return deleted > 0

    def delete_by_name(self, name: str) -> int:
        """Delete every row with the given name. Returns the number removed."""
        try:
            deleted = self.db.query(Recording).filter(Recording.name == name).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RecordStoreError(f"Delete failed: {e}") from e
        return deleted
