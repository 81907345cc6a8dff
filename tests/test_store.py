"""Integration Tests: ThoughtStore: the facade UI code talks to.

Invariants:
    - Operations never raise on storage failure
    - Every change is visible through load_all
    - Chats sharing one backend never see each other's thoughts
"""

from datetime import date, timedelta, timezone

import pytest

from core.keys import KeyNamespace
from core.store import ThoughtStore
from core.thoughts import SavedThought, Thought
from utils.formatters import HISTORY_LABEL_ALTERNATIVE, HISTORY_LABEL_AUTOMATIC


def _thought(text):
    return Thought(automatic_thought=text, alternative_thought=f"not {text}")


async def test_full_lifecycle(store, backend, clock):
    saved = await store.save(_thought("one"))
    collections = await store.load_all()
    assert [t.uuid for g in collections.active for t in g.thoughts] == [saved.uuid]
    assert collections.archived == []

    await store.archive(saved.uuid)
    collections = await store.load_all()
    archived_key = store.archived_key(store.namespace.suffix_of(saved.uuid))
    assert collections.active == []
    assert [t.uuid for g in collections.archived for t in g.thoughts] == [archived_key]

    await store.restore(archived_key)
    assert (await store.get(saved.uuid)).automatic_thought == "one"

    await store.archive(saved.uuid)
    await store.permanent_delete(archived_key)
    collections = await store.load_all()
    assert collections.is_empty
    assert backend.data == {}


async def test_load_all_groups_by_day(store, clock):
    first = await store.save(_thought("a"))
    clock.advance(hours=1)
    second = await store.save(_thought("b"))
    clock.advance(days=1)
    third = await store.save(_thought("c"))

    collections = await store.load_all()

    assert [g.date for g in collections.active] == [date(2023, 1, 2), date(2023, 1, 1)]
    assert [t.uuid for t in collections.active[0].thoughts] == [third.uuid]
    assert [t.uuid for t in collections.active[1].thoughts] == [first.uuid, second.uuid]


async def test_archived_thought_expires_after_retention(store, backend, clock):
    saved = await store.save(_thought("gone soon"))
    await store.archive(saved.uuid)

    clock.advance(days=7)
    assert len((await store.load_all()).archived) == 1

    clock.advance(seconds=1)
    assert (await store.load_all()).archived == []
    assert backend.data == {}


async def test_active_thoughts_never_expire(store, clock):
    await store.save(_thought("keeper"))
    clock.advance(days=365)
    assert len((await store.load_all()).active) == 1


async def test_save_failure_keeps_draft(store, backend):
    backend.fail_set = True
    draft = _thought("unsaved")

    result = await store.save(draft)

    assert result is draft
    assert not isinstance(result, SavedThought)
    assert (await store.load_all()).is_empty


async def test_get_outside_namespaces_is_none(store, backend):
    backend.data["@Quirk:existing-user"] = "true"
    assert await store.get("@Quirk:existing-user") is None
    assert await store.get("@Quirk:thoughts:missing") is None


async def test_total_backend_failure_never_raises(store, backend):
    saved = await store.save(_thought("x"))
    for flag in ("fail_get", "fail_set", "fail_remove", "fail_list",
                 "fail_multi_get", "fail_multi_remove"):
        setattr(backend, flag, True)

    await store.archive(saved.uuid)
    await store.restore(saved.uuid)
    await store.permanent_delete(saved.uuid)
    assert (await store.load_all()).is_empty
    assert await store.sweep_expired() == 0
    assert await store.is_existing_user() is False
    assert await store.mark_existing_user() is False
    assert await store.get_history_label() == HISTORY_LABEL_ALTERNATIVE
    assert list(backend.data) == [saved.uuid]


async def test_user_flags(store, backend):
    assert await store.is_existing_user() is False
    assert await store.mark_existing_user() is True
    assert await store.is_existing_user() is True

    assert await store.get_history_label() == HISTORY_LABEL_ALTERNATIVE
    assert await store.set_history_label(HISTORY_LABEL_AUTOMATIC) is True
    assert await store.get_history_label() == HISTORY_LABEL_AUTOMATIC

    with pytest.raises(ValueError):
        await store.set_history_label("bogus")

    # Flags are not thoughts
    assert (await store.load_all()).is_empty
    assert len(backend.data) == 2


async def test_unknown_stored_history_label_falls_back(store, backend):
    backend.data[store.history_label_key] = "something-else"
    assert await store.get_history_label() == HISTORY_LABEL_ALTERNATIVE


async def test_chats_are_isolated(backend, clock):
    alice = ThoughtStore.for_chat(1, backend=backend, clock=clock, tz=timezone.utc)
    bob = ThoughtStore.for_chat(2, backend=backend, clock=clock, tz=timezone.utc)

    mine = await alice.save(_thought("alice"))
    await bob.save(_thought("bob"))
    await alice.mark_existing_user()

    alice_view = await alice.load_all()
    bob_view = await bob.load_all()
    assert [t.uuid for g in alice_view.active for t in g.thoughts] == [mine.uuid]
    assert [t.automatic_thought for g in bob_view.active for t in g.thoughts] == ["bob"]
    assert await bob.is_existing_user() is False

    await bob.permanent_delete(mine.uuid)
    assert mine.uuid in backend.data


async def test_for_chat_uses_configured_retention(backend):
    store = ThoughtStore.for_chat(5, backend=backend)
    assert store.manager.retention == timedelta(days=7)
    assert store.namespace.state_of("@Quirk:5:thoughts:x") is not None
    assert repr(store.namespace) == repr(KeyNamespace.for_owner(5))


async def test_sweep_expired_counts_live_thoughts(store, clock):
    keep = await store.save(_thought("keep"))
    drop = await store.save(_thought("drop"))
    await store.archive(drop.uuid)
    clock.advance(days=8)

    assert await store.sweep_expired() == 1
    assert await store.get(keep.uuid) is not None
