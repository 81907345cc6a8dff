"""
Thought lifecycle: save, archive, restore, permanent delete, expiry.

    (none) --save--> ACTIVE --archive--> ARCHIVED --restore--> ACTIVE
    ARCHIVED --permanent_delete / expiry--> (none)

Moving a thought between namespaces is a write under the new key followed by
a removal of the old one. The removal only happens once the write has
succeeded: an interruption can leave the thought under both keys for a
moment (the loader de-duplicates), never under neither.

No method raises; failures are logged and the store is left as it was.
"""
import uuid as uuid_lib
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional, Union

from core.keys import KeyNamespace, ThoughtState
from core.storage import StorageAdapter
from core.thoughts import (
    SavedThought,
    Thought,
    ThoughtDecodeError,
    thought_from_json,
    thought_to_json,
    utc_now,
)
from utils.logger import get_logger, log_error

logger = get_logger(__name__)

DEFAULT_RETENTION = timedelta(days=7)


def new_identifier() -> str:
    return str(uuid_lib.uuid4())


class ThoughtLifecycleManager:
    """
    Mutations on stored thoughts.

    Args:
        storage: Non-raising storage adapter
        namespace: Key prefixes for active/archived thoughts
        retention: How long an archived thought survives after its last update
        clock: Returns the current time (aware datetime)
        id_factory: Mints identifiers for new thoughts
    """

    def __init__(
        self,
        storage: StorageAdapter,
        namespace: Optional[KeyNamespace] = None,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_identifier,
    ):
        if retention <= timedelta(0):
            raise ValueError("retention must be positive")
        self.storage = storage
        self.namespace = namespace or KeyNamespace()
        self.retention = retention
        self.clock = clock
        self.id_factory = id_factory

    def is_expired(self, thought: SavedThought, now: Optional[datetime] = None) -> bool:
        """True once more than ``retention`` has elapsed since the last update."""
        now = now or self.clock()
        return now - thought.updated_at > self.retention

    async def save(self, thought: Union[Thought, SavedThought]) -> Union[Thought, SavedThought]:
        """
        Persist a new or edited thought.

        A thought without a uuid gets one (under the active namespace) and
        fresh created/updated stamps. A saved thought is written in place with
        ``updated_at`` refreshed; ``created_at`` is only filled in when missing.

        Returns:
            The stored record, or the input unchanged if nothing was written
        """
        now = self.clock()
        if isinstance(thought, SavedThought) and thought.uuid:
            saveable = replace(thought, created_at=thought.created_at or now, updated_at=now)
        else:
            saveable = SavedThought(
                automatic_thought=thought.automatic_thought,
                challenge=thought.challenge,
                alternative_thought=thought.alternative_thought,
                cognitive_distortions=list(thought.cognitive_distortions),
                extra=dict(thought.extra),
                uuid=self.namespace.key_for(ThoughtState.ACTIVE, self.id_factory()),
                created_at=now,
                updated_at=now,
            )

        if not await self._write(saveable):
            return thought
        logger.info(f"Saved thought {saveable.uuid}")
        return saveable

    async def archive(self, key: str) -> None:
        """Soft-delete: move an active thought to the archive."""
        await self._move(key, ThoughtState.ACTIVE, ThoughtState.ARCHIVED)

    async def restore(self, key: str) -> None:
        """Move an archived thought back to the active namespace."""
        await self._move(key, ThoughtState.ARCHIVED, ThoughtState.ACTIVE)

    async def permanent_delete(self, key: str) -> None:
        """Remove a thought for good. Allowed from either namespace."""
        if self.namespace.state_of(key) is None:
            logger.warning(f"Refusing to delete key outside thought namespaces: {key}")
            return
        if await self.storage.remove(key):
            logger.info(f"Permanently deleted thought {key}")

    async def expire(self, keys: Iterable[str]) -> bool:
        """Best-effort removal of expired (or superseded) keys; retried on the next load."""
        keys = list(keys)
        if not keys:
            return True
        if await self.storage.batch_remove(keys):
            logger.info(f"Expiry sweep removed {len(keys)} thought(s)")
            return True
        logger.warning(f"Expiry sweep failed for {len(keys)} thought(s); will retry on next load")
        return False

    async def read(self, key: str) -> Optional[SavedThought]:
        """The thought stored under key; None if absent or unreadable."""
        raw = await self.storage.get(key)
        if raw is None:
            logger.warning(f"No thought stored under {key}")
            return None
        try:
            return thought_from_json(raw, key=key)
        except ThoughtDecodeError as e:
            log_error(logger, e, context=f"lifecycle.read key={key}")
            return None

    async def _write(self, thought: SavedThought) -> bool:
        try:
            payload = thought_to_json(thought)
        except (TypeError, ValueError, OverflowError, RecursionError) as e:
            # Never store something we can't read back
            log_error(logger, e, context=f"lifecycle.serialize key={thought.uuid}")
            return False
        if not payload:
            logger.warning(f"Empty payload for {thought.uuid}, not writing")
            return False
        return await self.storage.set(thought.uuid, payload)

    async def _move(self, key: str, source: ThoughtState, target: ThoughtState) -> None:
        if self.namespace.state_of(key) is not source:
            logger.warning(f"Cannot move {key} to {target.value}: not in the {source.value} namespace")
            return

        thought = await self.read(key)
        if thought is None:
            return

        moved = replace(
            thought,
            uuid=self.namespace.rekey(key, target),
            updated_at=self.clock(),
        )
        if not await self._write(moved):
            logger.warning(f"Move {key} -> {moved.uuid} aborted; original left in place")
            return
        if not await self.storage.remove(key):
            # The thought now exists under both keys; the loader keeps the newer copy.
            logger.warning(f"Moved {key} -> {moved.uuid} but could not remove the old key")
            return
        logger.info(f"Moved thought {key} -> {moved.uuid}")
