"""Unit Tests: StorageAdapter: non-raising access to the key/value primitive.

Invariants:
    - No method raises, whatever the backend does
    - Failures become None / False / [] fallbacks
    - Empty batches never reach the backend
"""

import pytest


async def test_set_get_remove(storage, backend):
    assert await storage.set("k", "v") is True
    assert await storage.get("k") == "v"
    assert await storage.exists("k") is True

    assert await storage.remove("k") is True
    assert await storage.get("k") is None
    assert await storage.exists("k") is False


async def test_get_failure_returns_none(storage, backend):
    backend.data["k"] = "v"
    backend.fail_get = True
    assert await storage.get("k") is None
    assert await storage.exists("k") is False


async def test_set_and_remove_failures_return_false(storage, backend):
    backend.data["k"] = "v"
    backend.fail_set = True
    backend.fail_remove = True

    assert await storage.set("k", "new") is False
    assert await storage.remove("k") is False
    assert backend.data["k"] == "v"


async def test_list_all_keys(storage, backend):
    backend.data.update({"a": "1", "b": "2"})
    assert sorted(await storage.list_all_keys()) == ["a", "b"]

    backend.fail_list = True
    assert await storage.list_all_keys() == []


async def test_batch_get_preserves_pairs(storage, backend):
    backend.data.update({"a": "1", "b": "2"})
    assert await storage.batch_get(["b", "missing", "a"]) == [
        ("b", "2"), ("missing", None), ("a", "1"),
    ]


async def test_batch_get_failure_and_empty_input(storage, backend):
    assert await storage.batch_get([]) == []
    assert backend.calls == []

    backend.fail_multi_get = True
    assert await storage.batch_get(["a"]) == []


@pytest.mark.parametrize("fail, expected", [(False, True), (True, False)])
async def test_batch_remove(storage, backend, fail, expected):
    backend.data.update({"a": "1", "b": "2", "c": "3"})
    backend.fail_multi_remove = fail

    assert await storage.batch_remove(["a", "b"]) is expected
    assert ("c" in backend.data) is True
    assert ("a" in backend.data) is fail


async def test_batch_remove_empty_is_a_no_op(storage, backend):
    assert await storage.batch_remove([]) is True
    assert backend.calls == []
