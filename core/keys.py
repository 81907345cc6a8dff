"""
Key namespaces for thought records.

A thought's lifecycle state is not a stored field. It is the prefix of its
storage key: one prefix for active thoughts, another for archived ones. This
module is the only place that knows about those prefixes.
"""
from enum import Enum
from typing import Iterable, List, Optional, Union

APP_PREFIX = "@Quirk:"
ACTIVE_PREFIX = f"{APP_PREFIX}thoughts:"
ARCHIVED_PREFIX = f"{APP_PREFIX}deleted-thoughts:"


class ThoughtState(Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class KeyNamespace:
    """Maps (state, id) pairs to storage keys and back."""

    def __init__(
        self,
        active_prefix: str = ACTIVE_PREFIX,
        archived_prefix: str = ARCHIVED_PREFIX,
        settings_prefix: str = APP_PREFIX,
    ):
        if not active_prefix or not archived_prefix:
            raise ValueError("Namespace prefixes must be non-empty")
        if active_prefix.startswith(archived_prefix) or archived_prefix.startswith(active_prefix):
            raise ValueError(
                f"Namespace prefixes overlap: {active_prefix!r} / {archived_prefix!r}"
            )
        self._prefixes = {
            ThoughtState.ACTIVE: active_prefix,
            ThoughtState.ARCHIVED: archived_prefix,
        }
        self.settings_prefix = settings_prefix

    @classmethod
    def for_owner(cls, owner: Union[int, str]) -> "KeyNamespace":
        """Namespace for one journal owner (e.g. a Telegram chat) in a shared store."""
        base = f"{APP_PREFIX}{owner}:"
        return cls(f"{base}thoughts:", f"{base}deleted-thoughts:", settings_prefix=base)

    def prefix(self, state: ThoughtState) -> str:
        return self._prefixes[state]

    def settings_key(self, name: str) -> str:
        """Key for a per-journal setting; never inside either thought namespace."""
        key = self.settings_prefix + name
        if self.state_of(key) is not None:
            raise ValueError(f"Setting name {name!r} collides with a thought namespace")
        return key

    def key_for(self, state: ThoughtState, identifier: str) -> str:
        return self._prefixes[state] + identifier

    def state_of(self, key: str) -> Optional[ThoughtState]:
        """State encoded in key, or None if the key belongs to neither namespace."""
        if not isinstance(key, str):
            return None
        for state, prefix in self._prefixes.items():
            if key.startswith(prefix):
                return state
        return None

    def suffix_of(self, key: str) -> str:
        state = self.state_of(key)
        if state is None:
            raise ValueError(f"Key outside thought namespaces: {key!r}")
        return key[len(self._prefixes[state]):]

    def rekey(self, key: str, new_state: ThoughtState) -> str:
        """Same identifier, new state."""
        return self.key_for(new_state, self.suffix_of(key))

    @staticmethod
    def owners_in(keys: Iterable[str]) -> List[str]:
        """Owners that have per-owner thought keys among ``keys``, in first-seen order."""
        owners = []
        for key in keys:
            if not isinstance(key, str) or not key.startswith(APP_PREFIX):
                continue
            owner, sep, rest = key[len(APP_PREFIX):].partition(":")
            if not sep or not owner or owner in owners:
                continue
            if rest.startswith("thoughts:") or rest.startswith("deleted-thoughts:"):
                owners.append(owner)
        return owners

    def __repr__(self):
        return (
            f"<KeyNamespace(active='{self._prefixes[ThoughtState.ACTIVE]}', "
            f"archived='{self._prefixes[ThoughtState.ARCHIVED]}')>"
        )
