"""Unit Tests: ThoughtLifecycleManager: save, archive, restore, delete, expiry.

Invariants:
    - A thought lives under exactly one key, except transiently mid-move
    - A move writes the new key before removing the old one
    - A failed write leaves the store untouched
    - Permanent delete is terminal
    - Expiry is strictly "more than retention since last update"
"""

from datetime import timedelta

import pytest

from core.keys import ThoughtState
from core.lifecycle import ThoughtLifecycleManager
from core.thoughts import SavedThought, Thought, thought_from_json


def _thought(text="I always mess up"):
    return Thought(automatic_thought=text, alternative_thought="Sometimes I don't")


def _stored(backend, key):
    return thought_from_json(backend.data[key], key=key)


# -- save ----------------------------------------------------------------------

async def test_save_new_thought(manager, backend, clock):
    saved = await manager.save(_thought())

    assert isinstance(saved, SavedThought)
    assert saved.uuid == "@Quirk:thoughts:00000000-0000-4000-8000-000000000001"
    assert saved.created_at == saved.updated_at == clock.now
    assert list(backend.data) == [saved.uuid]
    assert _stored(backend, saved.uuid) == saved


async def test_resave_keeps_key_and_created_at(manager, backend, clock):
    saved = await manager.save(_thought())
    clock.advance(hours=2)

    saved.challenge = "Evidence says otherwise"
    updated = await manager.save(saved)

    assert updated.uuid == saved.uuid
    assert updated.created_at == saved.created_at
    assert updated.updated_at == clock.now
    assert list(backend.data) == [saved.uuid]
    assert _stored(backend, saved.uuid).challenge == "Evidence says otherwise"


async def test_failed_save_returns_input_unchanged(manager, backend):
    backend.fail_set = True
    draft = _thought()

    result = await manager.save(draft)

    assert result is draft
    assert backend.data == {}


async def test_unserializable_save_writes_nothing(manager, backend):
    loop = {}
    loop["self"] = loop
    draft = Thought(automatic_thought="x", extra={"loop": loop})

    result = await manager.save(draft)

    assert result is draft
    assert backend.data == {}
    assert not any(op == "set" for op, _ in backend.calls)


async def test_deeply_nested_save_writes_nothing(manager, backend):
    deep = []
    for _ in range(100000):
        deep = [deep]
    draft = Thought(automatic_thought="x", extra={"deep": deep})

    result = await manager.save(draft)

    assert result is draft
    assert backend.data == {}


async def test_resave_fills_in_missing_created_at(manager, backend, clock):
    key = "@Quirk:thoughts:abc"

    saved = await manager.save(SavedThought(uuid=key, automatic_thought="x"))

    assert saved.created_at == saved.updated_at == clock.now
    reloaded = await manager.read(key)
    assert reloaded == saved


# -- archive / restore ---------------------------------------------------------

async def test_archive_moves_to_archived_namespace(manager, backend, clock):
    saved = await manager.save(_thought())
    clock.advance(minutes=5)

    await manager.archive(saved.uuid)

    archived_key = manager.namespace.rekey(saved.uuid, ThoughtState.ARCHIVED)
    assert list(backend.data) == [archived_key]
    archived = _stored(backend, archived_key)
    assert archived.uuid == archived_key
    assert archived.updated_at == clock.now
    assert archived.created_at == saved.created_at


async def test_archive_then_restore_is_identity_up_to_updated_at(manager, backend, clock):
    saved = await manager.save(_thought())
    await manager.archive(saved.uuid)
    clock.advance(days=1)
    await manager.restore(manager.namespace.rekey(saved.uuid, ThoughtState.ARCHIVED))

    assert list(backend.data) == [saved.uuid]
    restored = _stored(backend, saved.uuid)
    assert restored.updated_at == clock.now
    restored.updated_at = saved.updated_at
    assert restored == saved


async def test_move_writes_before_removing(manager, backend):
    saved = await manager.save(_thought())
    backend.calls.clear()

    await manager.archive(saved.uuid)

    mutations = [(op, key) for op, key in backend.calls if op in ("set", "remove")]
    archived_key = manager.namespace.rekey(saved.uuid, ThoughtState.ARCHIVED)
    assert mutations == [("set", archived_key), ("remove", saved.uuid)]


async def test_failed_write_leaves_original_in_place(manager, backend):
    saved = await manager.save(_thought())
    archived_key = manager.namespace.rekey(saved.uuid, ThoughtState.ARCHIVED)
    backend.fail_set = {archived_key}

    await manager.archive(saved.uuid)

    assert list(backend.data) == [saved.uuid]
    assert not any(op == "remove" for op, _ in backend.calls)


async def test_failed_remove_leaves_both_copies(manager, backend):
    saved = await manager.save(_thought())
    backend.fail_remove = {saved.uuid}

    await manager.archive(saved.uuid)

    archived_key = manager.namespace.rekey(saved.uuid, ThoughtState.ARCHIVED)
    assert set(backend.data) == {saved.uuid, archived_key}
    assert await manager.read(saved.uuid) is not None
    assert await manager.read(archived_key) is not None


@pytest.mark.parametrize("action, key", [
    ("archive", "@Quirk:deleted-thoughts:x"),
    ("restore", "@Quirk:thoughts:x"),
    ("archive", "@Quirk:existing-user"),
    ("restore", "@Quirk:existing-user"),
])
async def test_move_from_wrong_namespace_is_a_no_op(manager, backend, action, key):
    backend.data[key] = "untouched"

    await getattr(manager, action)(key)

    assert backend.data == {key: "untouched"}
    assert not any(op in ("set", "remove") for op, _ in backend.calls)


async def test_archive_missing_or_corrupt_thought_is_a_no_op(manager, backend):
    await manager.archive("@Quirk:thoughts:missing")
    backend.data["@Quirk:thoughts:bad"] = "not json"
    await manager.archive("@Quirk:thoughts:bad")

    assert backend.data == {"@Quirk:thoughts:bad": "not json"}


# -- permanent delete ----------------------------------------------------------

@pytest.mark.parametrize("archive_first", [True, False])
async def test_permanent_delete_is_terminal(manager, backend, archive_first):
    saved = await manager.save(_thought())
    key = saved.uuid
    if archive_first:
        await manager.archive(key)
        key = manager.namespace.rekey(key, ThoughtState.ARCHIVED)

    await manager.permanent_delete(key)

    assert backend.data == {}
    assert await manager.read(key) is None
    await manager.restore(key)
    assert backend.data == {}


async def test_permanent_delete_refuses_foreign_keys(manager, backend):
    backend.data["@Quirk:existing-user"] = "true"

    await manager.permanent_delete("@Quirk:existing-user")

    assert backend.data == {"@Quirk:existing-user": "true"}


# -- expiry --------------------------------------------------------------------

@pytest.mark.parametrize("elapsed, expired", [
    (timedelta(days=7) - timedelta(seconds=1), False),
    (timedelta(days=7), False),
    (timedelta(days=7) + timedelta(seconds=1), True),
])
async def test_expiry_boundary(manager, clock, elapsed, expired):
    saved = await manager.save(_thought())
    assert manager.is_expired(saved, clock.now + elapsed) is expired


async def test_expire_removes_keys_best_effort(manager, backend):
    backend.data.update({"@Quirk:deleted-thoughts:a": "{}", "@Quirk:deleted-thoughts:b": "{}"})

    assert await manager.expire([]) is True
    assert backend.removed_batches() == []

    backend.fail_multi_remove = True
    assert await manager.expire(["@Quirk:deleted-thoughts:a"]) is False
    assert len(backend.data) == 2

    backend.fail_multi_remove = False
    assert await manager.expire(["@Quirk:deleted-thoughts:a"]) is True
    assert list(backend.data) == ["@Quirk:deleted-thoughts:b"]


def test_retention_must_be_positive(storage):
    with pytest.raises(ValueError):
        ThoughtLifecycleManager(storage, retention=timedelta(0))
