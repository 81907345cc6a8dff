"""
The journal's public interface.

    store = ThoughtStore.for_chat(chat_id)
    saved = await store.save(Thought(automatic_thought="..."))
    await store.archive(saved.uuid)
    collections = await store.load_all()   # day groups, active and archived

Everything here is safe to call from UI code: storage problems are logged and
show up only as a reload that doesn't reflect the change.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Callable, List, Optional, Union

from core.grouping import group_thoughts_by_day
from core.keys import KeyNamespace, ThoughtState
from core.lifecycle import DEFAULT_RETENTION, ThoughtLifecycleManager
from core.loader import CollectionLoader
from core.storage import KeyValueBackend, StorageAdapter
from core.thoughts import SavedThought, Thought, ThoughtGroup, utc_now
from utils.formatters import HISTORY_LABEL_ALTERNATIVE, HISTORY_LABELS
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ThoughtCollections:
    active: List[ThoughtGroup] = field(default_factory=list)
    archived: List[ThoughtGroup] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.active and not self.archived


class ThoughtStore:
    """
    Facade over the lifecycle manager, loader and grouping.

    Args:
        backend: Host key/value primitive
        namespace: Key prefixes; also scopes the user flags below
        retention: Grace period for archived thoughts
        tz: Timezone that defines a calendar day for grouping (None = host local)
        clock: Current-time source, injectable for tests
        id_factory: Identifier source, injectable for tests
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        namespace: Optional[KeyNamespace] = None,
        retention: timedelta = DEFAULT_RETENTION,
        tz: Optional[tzinfo] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.storage = StorageAdapter(backend)
        self.namespace = namespace or KeyNamespace()
        manager_kwargs = {"id_factory": id_factory} if id_factory else {}
        self.manager = ThoughtLifecycleManager(
            self.storage,
            namespace=self.namespace,
            retention=retention,
            clock=clock,
            **manager_kwargs,
        )
        self.loader = CollectionLoader(self.manager)
        self.tz = tz

    @classmethod
    def for_chat(
        cls,
        chat_id: Union[int, str],
        backend: Optional[KeyValueBackend] = None,
        **kwargs
    ) -> "ThoughtStore":
        """
        Store for one Telegram chat on the shared SQL table.

        Retention and timezone default to the configured values.
        """
        from config import journal_config
        from core.database import SqlKeyValueStore

        kwargs.setdefault("retention", journal_config.retention)
        kwargs.setdefault("tz", journal_config.timezone)
        return cls(
            backend or SqlKeyValueStore(),
            namespace=KeyNamespace.for_owner(chat_id),
            **kwargs,
        )

    # Thought operations

    async def load_all(self) -> ThoughtCollections:
        stored = await self.loader.load()
        return ThoughtCollections(
            active=group_thoughts_by_day(stored.active, self.tz),
            archived=group_thoughts_by_day(stored.archived, self.tz),
        )

    async def save(self, thought: Union[Thought, SavedThought]) -> Union[Thought, SavedThought]:
        return await self.manager.save(thought)

    async def archive(self, key: str) -> None:
        await self.manager.archive(key)

    async def restore(self, key: str) -> None:
        await self.manager.restore(key)

    async def permanent_delete(self, key: str) -> None:
        await self.manager.permanent_delete(key)

    async def get(self, key: str) -> Optional[SavedThought]:
        """A single thought by key, or None if absent or unreadable."""
        if self.namespace.state_of(key) is None:
            return None
        return await self.manager.read(key)

    async def sweep_expired(self) -> int:
        """Run a load for its cleanup side effect. Returns live thoughts seen."""
        stored = await self.loader.load()
        return len(stored.active) + len(stored.archived)

    def active_key(self, identifier: str) -> str:
        return self.namespace.key_for(ThoughtState.ACTIVE, identifier)

    def archived_key(self, identifier: str) -> str:
        return self.namespace.key_for(ThoughtState.ARCHIVED, identifier)

    # User flags, stored beside the journal under non-thought keys

    @property
    def existing_user_key(self) -> str:
        return self.namespace.settings_key("existing-user")

    @property
    def history_label_key(self) -> str:
        return self.namespace.settings_key("history-button-label")

    async def is_existing_user(self) -> bool:
        return await self.storage.exists(self.existing_user_key)

    async def mark_existing_user(self) -> bool:
        return await self.storage.set(self.existing_user_key, "true")

    async def get_history_label(self) -> str:
        """Which text list views show: alternative (default) or automatic thought."""
        value = await self.storage.get(self.history_label_key)
        if value in HISTORY_LABELS:
            return value
        return HISTORY_LABEL_ALTERNATIVE

    async def set_history_label(self, label: str) -> bool:
        if label not in HISTORY_LABELS:
            raise ValueError(f"Unknown history label: {label!r}")
        return await self.storage.set(self.history_label_key, label)
