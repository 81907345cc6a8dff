"""
One-pass loading of every stored thought.

This is the single place where bad stored data is filtered out. Missing,
null, non-JSON or otherwise unusable values are dropped with a warning; they
never reach the caller.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from core.keys import ThoughtState
from core.lifecycle import ThoughtLifecycleManager
from core.thoughts import SavedThought, ThoughtDecodeError, thought_from_json
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class StoredThoughts:
    active: List[SavedThought] = field(default_factory=list)
    archived: List[SavedThought] = field(default_factory=list)


class CollectionLoader:
    """
    Reads, cleans and partitions the journal.

    Expired archived thoughts, and stale copies left behind by an interrupted
    archive/restore, are removed in one best-effort batch at the end of the
    load. A failed removal is simply tried again on the next load.
    """

    def __init__(self, manager: ThoughtLifecycleManager):
        self.manager = manager
        self.storage = manager.storage
        self.namespace = manager.namespace

    async def load(self) -> StoredThoughts:
        keys = [
            key for key in await self.storage.list_all_keys()
            if self.namespace.state_of(key) is not None
        ]
        rows = await self.storage.batch_get(keys)

        live, stale = self._deduplicate(self._decode(rows))

        now = self.manager.clock()
        result = StoredThoughts()
        expired: List[str] = []
        for state, thought in live:
            if state is ThoughtState.ACTIVE:
                result.active.append(thought)
            elif self.manager.is_expired(thought, now):
                expired.append(thought.uuid)
            else:
                result.archived.append(thought)

        if stale:
            logger.info(f"Cleaning up {len(stale)} superseded thought copies")
        await self.manager.expire(stale + expired)

        logger.debug(
            f"Loaded {len(result.active)} active, {len(result.archived)} archived, "
            f"{len(expired)} expired"
        )
        return result

    def _decode(self, rows) -> List[Tuple[ThoughtState, SavedThought]]:
        decoded = []
        for row in rows:
            if not row or len(row) != 2:
                continue
            key, raw = row
            state = self.namespace.state_of(key)
            if state is None:
                continue
            try:
                decoded.append((state, thought_from_json(raw, key=key)))
            except ThoughtDecodeError as e:
                logger.warning(f"Skipping unreadable thought {key}: {e}")
        return decoded

    def _deduplicate(
        self, decoded: List[Tuple[ThoughtState, SavedThought]]
    ) -> Tuple[List[Tuple[ThoughtState, SavedThought]], List[str]]:
        """
        Keep one copy per identifier.

        A thought seen under both namespaces was mid-move. The copy with the
        later ``updated_at`` wins; on a tie the active copy wins.

        Returns:
            (surviving (state, thought) pairs in load order, keys of losing copies)
        """
        winners: Dict[str, Tuple[ThoughtState, SavedThought]] = {}
        order: List[str] = []
        stale: List[str] = []

        for state, thought in decoded:
            suffix = self.namespace.suffix_of(thought.uuid)
            current = winners.get(suffix)
            if current is None:
                winners[suffix] = (state, thought)
                order.append(suffix)
                continue

            current_state, current_thought = current
            if thought.updated_at > current_thought.updated_at or (
                thought.updated_at == current_thought.updated_at
                and state is ThoughtState.ACTIVE
            ):
                winners[suffix] = (state, thought)
                stale.append(current_thought.uuid)
            else:
                stale.append(thought.uuid)

        return [winners[suffix] for suffix in order], stale
