"""Root conftest: shared fixtures for the thought store tests."""

import itertools
import os
import tempfile
from datetime import datetime, timedelta, timezone

# Keep test runs away from the real database and log directory
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="journal-logs-")
os.environ["JOURNAL_DATABASE_URL"] = "sqlite://"
os.environ.pop("DATABASE_URL", None)

import pytest  # noqa: E402

from core.keys import KeyNamespace  # noqa: E402
from core.lifecycle import ThoughtLifecycleManager  # noqa: E402
from core.storage import StorageAdapter  # noqa: E402
from core.store import ThoughtStore  # noqa: E402

START = datetime(2023, 1, 1, 10, 0, tzinfo=timezone.utc)


class BackendError(RuntimeError):
    pass


class FakeKeyValueStore:
    """
    Dict-backed async key/value primitive.

    Failures are switched on per operation; ``fail_set`` / ``fail_remove``
    take either True (every key) or a set of keys.
    """

    def __init__(self, data=None):
        self.data = dict(data or {})
        self.fail_get = False
        self.fail_set = False
        self.fail_remove = False
        self.fail_list = False
        self.fail_multi_get = False
        self.fail_multi_remove = False
        self.calls = []

    @staticmethod
    def _fails(flag, key):
        return flag is True or (isinstance(flag, (set, frozenset)) and key in flag)

    async def get(self, key):
        self.calls.append(("get", key))
        if self.fail_get:
            raise BackendError("get failed")
        return self.data.get(key)

    async def set(self, key, value):
        self.calls.append(("set", key))
        if self._fails(self.fail_set, key):
            raise BackendError(f"set failed for {key}")
        self.data[key] = value

    async def remove(self, key):
        self.calls.append(("remove", key))
        if self._fails(self.fail_remove, key):
            raise BackendError(f"remove failed for {key}")
        self.data.pop(key, None)

    async def list_all_keys(self):
        self.calls.append(("list_all_keys", None))
        if self.fail_list:
            raise BackendError("list failed")
        return list(self.data)

    async def multi_get(self, keys):
        keys = list(keys)
        self.calls.append(("multi_get", tuple(keys)))
        if self.fail_multi_get:
            raise BackendError("multi_get failed")
        return [(key, self.data.get(key)) for key in keys]

    async def multi_remove(self, keys):
        keys = list(keys)
        self.calls.append(("multi_remove", tuple(keys)))
        if self.fail_multi_remove:
            raise BackendError("multi_remove failed")
        for key in keys:
            self.data.pop(key, None)

    def removed_batches(self):
        return [keys for op, keys in self.calls if op == "multi_remove"]


class Clock:
    """Settable clock; call it to get the current instant."""

    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


def sequential_ids():
    counter = itertools.count(1)
    return lambda: f"00000000-0000-4000-8000-{next(counter):012d}"


@pytest.fixture
def backend():
    return FakeKeyValueStore()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def namespace():
    return KeyNamespace()


@pytest.fixture
def storage(backend):
    return StorageAdapter(backend)


@pytest.fixture
def manager(storage, namespace, clock):
    return ThoughtLifecycleManager(
        storage,
        namespace=namespace,
        retention=timedelta(days=7),
        clock=clock,
        id_factory=sequential_ids(),
    )


@pytest.fixture
def store(backend, clock):
    return ThoughtStore(
        backend,
        retention=timedelta(days=7),
        tz=timezone.utc,
        clock=clock,
        id_factory=sequential_ids(),
    )
