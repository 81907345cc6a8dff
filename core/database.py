"""
SQL-backed key/value primitive.

This is the host storage engine the thought store sits on: a flat table of
string keys and string values with async get/set/remove/list/multi-get/
multi-remove. It makes no attempt to hide failures; errors propagate to the
caller (core/storage.py is the layer that turns them into fallbacks).
"""
from contextlib import contextmanager
from typing import Callable, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session as SQLAlchemySession

from utils.logger import get_logger

logger = get_logger(__name__)


def _default_session_factory() -> SQLAlchemySession:
    from dbhelper import Session
    return Session()


@contextmanager
def transaction(session_factory: Optional[Callable[[], SQLAlchemySession]] = None):
    """
    Context manager for database transactions.

    Automatically commits on success, rolls back on error.

    Usage:
        with transaction() as session:
            KeyValue.upsert(session, "key", "value")
        # Automatically committed if no exception
    """
    session = (session_factory or _default_session_factory)()
    try:
        yield session
        session.commit()
        logger.debug("Transaction committed successfully")
    except Exception as e:
        session.rollback()
        logger.error(f"Transaction rolled back due to error: {e}", exc_info=True)
        raise
    finally:
        session.close()


class SqlKeyValueStore:
    """
    Async key/value primitive over the kv_store table.

    Each call runs in its own short-lived session, so a failure in one call
    never leaves another call's work half-committed.
    """

    def __init__(self, session_factory: Optional[Callable[[], SQLAlchemySession]] = None):
        self.session_factory = session_factory or _default_session_factory

    async def get(self, key: str) -> Optional[str]:
        from models import KeyValue

        with transaction(self.session_factory) as session:
            row = KeyValue.get_by_key(session, key)
            return row.value if row is not None else None

    async def set(self, key: str, value: str) -> None:
        from models import KeyValue

        with transaction(self.session_factory) as session:
            KeyValue.upsert(session, key, value)

    async def remove(self, key: str) -> None:
        from models import KeyValue

        with transaction(self.session_factory) as session:
            KeyValue.delete_keys(session, [key])

    async def list_all_keys(self) -> List[str]:
        from models import KeyValue

        with transaction(self.session_factory) as session:
            return KeyValue.get_all_keys(session)

    async def multi_get(self, keys: Iterable[str]) -> List[Tuple[str, Optional[str]]]:
        """Values for keys, in the order requested. Missing keys pair with None."""
        from models import KeyValue

        keys = list(keys)
        with transaction(self.session_factory) as session:
            found = KeyValue.get_many(session, keys)
        return [(key, found.get(key)) for key in keys]

    async def multi_remove(self, keys: Iterable[str]) -> None:
        from models import KeyValue

        keys = list(keys)
        with transaction(self.session_factory) as session:
            deleted = KeyValue.delete_keys(session, keys)
        logger.debug(f"Removed {deleted} of {len(keys)} keys")
