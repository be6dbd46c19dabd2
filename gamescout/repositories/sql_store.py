"""Key-value medium backed by a SQL table (SQLAlchemy)."""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from ..errors import MediumUnavailable
from .base import KeyValueStore

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class KeyValueEntry(Base):
    """One stored key and its serialised value."""
    __tablename__ = 'kv_entries'

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


class SqlKeyValueStore(KeyValueStore):
    """Persists keys as rows of the ``kv_entries`` table.

    If the engine cannot be created or the table cannot be initialised the
    store reports itself unavailable instead of raising, so callers running
    without a database degrade to an empty wishlist.
    """

    def __init__(self, database_url: str = 'sqlite:///gamescout.db',
                 engine=None,
                 max_value_bytes: Optional[int] = None) -> None:
        super().__init__(max_value_bytes)
        self.engine = None
        self._session_factory = None
        try:
            self.engine = engine if engine is not None else create_engine(database_url, echo=False)
            Base.metadata.create_all(bind=self.engine)
            self._session_factory = sessionmaker(autocommit=False, autoflush=False,
                                                 bind=self.engine)
        except (SQLAlchemyError, ImportError) as exc:
            self._log.warning("Database not available, wishlist storage disabled: %s", exc)
            self.engine = None
            self._session_factory = None

    def is_available(self) -> bool:
        return self._session_factory is not None

    def _read(self, key: str) -> Optional[str]:
        try:
            with self._session_factory() as db:
                row = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
                return row.value if row else None
        except SQLAlchemyError as exc:
            raise MediumUnavailable(f"Could not read '{key}': {exc}") from exc

    def _write(self, key: str, value: str) -> bool:
        with self._session_factory() as db:
            try:
                row = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
                if row:
                    row.value = value
                else:
                    db.add(KeyValueEntry(key=key, value=value))
                db.commit()
                return True
            except SQLAlchemyError as exc:
                db.rollback()
                self._log.error("Could not write '%s': %s", key, exc)
                return False

    def _delete(self, key: str) -> bool:
        with self._session_factory() as db:
            try:
                deleted = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).delete()
                db.commit()
                return deleted > 0
            except SQLAlchemyError as exc:
                db.rollback()
                raise MediumUnavailable(f"Could not delete '{key}': {exc}") from exc
