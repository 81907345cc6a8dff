"""
Storage adapter around the host key/value primitive.

Nothing raises past this class. Every failure is logged and turned into a
fallback value (None, False or an empty list), so a storage hiccup costs at
most the one change being written, never the whole journal.
"""
from typing import Iterable, List, Optional, Protocol, Tuple

from utils.logger import get_logger, log_error, log_storage_operation

logger = get_logger(__name__)


class KeyValueBackend(Protocol):
    """The async key/value primitive supplied by the host. Any method may raise."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def list_all_keys(self) -> List[str]: ...

    async def multi_get(self, keys: Iterable[str]) -> List[Tuple[str, Optional[str]]]: ...

    async def multi_remove(self, keys: Iterable[str]) -> None: ...


class StorageAdapter:
    """
    Uniform, non-raising access to a KeyValueBackend.

    Args:
        backend: The key/value primitive to wrap
    """

    def __init__(self, backend: KeyValueBackend):
        self.backend = backend

    async def get(self, key: str) -> Optional[str]:
        """Value stored under key, or None if absent or unreadable."""
        try:
            value = await self.backend.get(key)
        except Exception as e:
            log_error(logger, e, context=f"storage.get key={key}")
            return None
        log_storage_operation(logger, "get", key=key)
        return value

    async def exists(self, key: str) -> bool:
        return bool(await self.get(key))

    async def set(self, key: str, value: str) -> bool:
        """
        Store value under key.

        Returns:
            True if the write went through, False otherwise
        """
        try:
            await self.backend.set(key, value)
        except Exception as e:
            log_error(logger, e, context=f"storage.set key={key}")
            log_storage_operation(logger, "set", key=key, success=False)
            return False
        log_storage_operation(logger, "set", key=key)
        return True

    async def remove(self, key: str) -> bool:
        try:
            await self.backend.remove(key)
        except Exception as e:
            log_error(logger, e, context=f"storage.remove key={key}")
            log_storage_operation(logger, "remove", key=key, success=False)
            return False
        log_storage_operation(logger, "remove", key=key)
        return True

    async def list_all_keys(self) -> List[str]:
        try:
            keys = await self.backend.list_all_keys()
        except Exception as e:
            log_error(logger, e, context="storage.list_all_keys")
            return []
        keys = list(keys or [])
        log_storage_operation(logger, "list", count=len(keys))
        return keys

    async def batch_get(self, keys: Iterable[str]) -> List[Tuple[str, Optional[str]]]:
        """
        Fetch several keys at once.

        Returns:
            (key, value) pairs in backend order; an empty list on failure
        """
        keys = list(keys)
        if not keys:
            return []
        try:
            rows = await self.backend.multi_get(keys)
        except Exception as e:
            log_error(logger, e, context=f"storage.batch_get count={len(keys)}")
            return []
        rows = list(rows or [])
        log_storage_operation(logger, "batch_get", count=len(rows))
        return rows

    async def batch_remove(self, keys: Iterable[str]) -> bool:
        """Best-effort removal of several keys."""
        keys = list(keys)
        if not keys:
            return True
        try:
            await self.backend.multi_remove(keys)
        except Exception as e:
            log_error(logger, e, context=f"storage.batch_remove count={len(keys)}")
            log_storage_operation(logger, "batch_remove", count=len(keys), success=False)
            return False
        log_storage_operation(logger, "batch_remove", count=len(keys))
        return True
