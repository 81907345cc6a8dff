"""
Database models for the journal.

The journal itself is schemaless: every thought is a JSON document stored in a
flat key/value table. Lifecycle state lives in the key (see core/keys.py).
"""
from datetime import datetime, timezone
from typing import Optional, List, Dict, Iterable, TYPE_CHECKING

from sqlalchemy import Column, DateTime, String, Text

from dbhelper import Base

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KeyValue(Base):
    """Key/value model - one row per stored key."""
    __tablename__ = 'kv_store'

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    @classmethod
    def get_by_key(cls, session: "Session", key: str) -> Optional["KeyValue"]:
        """Get a row by its key."""
        return session.query(cls).filter(cls.key == key).first()

    @classmethod
    def get_all_keys(cls, session: "Session") -> List[str]:
        """Get every stored key."""
        return [row.key for row in session.query(cls.key).all()]

    @classmethod
    def get_many(cls, session: "Session", keys: Iterable[str]) -> Dict[str, Optional[str]]:
        """Get values for several keys at once; missing keys are absent from the result."""
        keys = list(keys)
        if not keys:
            return {}
        rows = session.query(cls).filter(cls.key.in_(keys)).all()
        return {row.key: row.value for row in rows}

    @classmethod
    def upsert(cls, session: "Session", key: str, value: Optional[str]) -> "KeyValue":
        """Insert or overwrite the value stored under key. Caller commits."""
        row = cls.get_by_key(session, key)
        if row is None:
            row = cls(key=key, value=value)
            session.add(row)
        else:
            row.value = value
            row.updated_at = _utcnow()
        return row

    @classmethod
    def delete_keys(cls, session: "Session", keys: Iterable[str]) -> int:
        """Delete rows for the given keys. Caller commits. Returns rows deleted."""
        keys = list(keys)
        if not keys:
            return 0
        return (
            session.query(cls)
            .filter(cls.key.in_(keys))
            .delete(synchronize_session=False)
        )

    def __repr__(self):
        size = len(self.value) if self.value is not None else 0
        return f"<KeyValue(key='{self.key}', bytes={size})>"
