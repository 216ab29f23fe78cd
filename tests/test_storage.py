"""Tests for SimpleStorage get/set/has/remove."""

import pytest

from simple_storage.core.database import (
    SimpleStorage,
    get_storage,
    reset_storage,
    resolve_storage_path,
)
from simple_storage.utils.errors import (
    InvalidKeyError,
    InvalidTableError,
    InvalidValueError,
)


@pytest.mark.asyncio
async def test_missing_key(storage):
    """Keys never set are absent and read as None."""
    assert await storage.has("test", "nothing") is False
    assert await storage.get("test", "nothing") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "value",
    [
        "myVal",
        "",
        0,
        -12.5,
        True,
        False,
        None,
        [1, "two", None, {"three": 3}],
        {"k1": "v1", "k2": "v2"},
        {"nested": {"list": [], "empty": {}}},
        "héllo ✓",
    ],
)
async def test_set_then_get_returns_value(storage, value):
    """Every JSON value comes back deep-equal."""
    assert await storage.set("test", "key", value) is True
    assert await storage.get("test", "key") == value


@pytest.mark.asyncio
async def test_set_reports_insert_then_update(storage):
    """First set inserts, second set updates in place."""
    assert await storage.set("test", "key", "v1") is True
    assert await storage.set("test", "key", "v2") is False
    assert await storage.get("test", "key") == "v2"


@pytest.mark.asyncio
async def test_remove_absent_key(storage):
    """Removing a missing key is not an error and changes nothing."""
    await storage.set("test", "other", 1)

    assert await storage.remove("test", "missing") is False
    assert await storage.get("test", "other") == 1


@pytest.mark.asyncio
async def test_remove_present_key(storage):
    await storage.set("test", "key", {"a": 1})

    assert await storage.remove("test", "key") is True
    assert await storage.get("test", "key") is None
    assert await storage.has("test", "key") is False
    assert await storage.remove("test", "key") is False


@pytest.mark.asyncio
async def test_round_trip_sequence(storage):
    """set, get, remove, get in strict order."""
    assert await storage.set("test", "key", [1, 2]) is True
    assert await storage.get("test", "key") == [1, 2]
    assert await storage.remove("test", "key") is True
    assert await storage.get("test", "key") is None


@pytest.mark.asyncio
async def test_my_key_walkthrough(storage):
    """The classic myKey walk-through."""
    assert await storage.set("test", "myKey", "myVal") is True
    assert await storage.get("test", "myKey") == "myVal"

    o = {"k1": "v1", "k2": "v2"}
    assert await storage.set("test", "myKey", o) is False
    assert await storage.get("test", "myKey") == o

    assert await storage.remove("test", "myKey") is True
    assert await storage.has("test", "myKey") is False


@pytest.mark.asyncio
async def test_stored_null_is_present(storage):
    """A stored null reads as None but the row still exists."""
    assert await storage.set("test", "empty", None) is True

    assert await storage.get("test", "empty") is None
    assert await storage.has("test", "empty") is True
    assert await storage.set("test", "empty", 1) is False
    assert await storage.remove("test", "empty") is True


@pytest.mark.asyncio
async def test_tables_are_independent(storage):
    await storage.set("ext_a", "shared", "a")
    await storage.set("ext_b", "shared", "b")

    assert await storage.get("ext_a", "shared") == "a"
    assert await storage.get("ext_b", "shared") == "b"

    await storage.remove("ext_a", "shared")
    assert await storage.has("ext_a", "shared") is False
    assert await storage.has("ext_b", "shared") is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "table_name",
    ["my table", "select", "Ext-Name.v2", "a:b", "quote\"d", "conversations@example.org"],
)
async def test_unusual_table_names(storage, table_name):
    """Names are quoted, never spliced into SQL."""
    assert await storage.set(table_name, "k", "v") is True
    assert await storage.get(table_name, "k") == "v"
    assert await storage.remove(table_name, "k") is True


@pytest.mark.asyncio
async def test_values_persist_across_instances(data_dir, storage_config):
    first = SimpleStorage(data_dir=data_dir, config=storage_config)
    await first.set("prefs", "theme", {"dark": True})
    await first.close()

    second = SimpleStorage(data_dir=data_dir, config=storage_config)
    try:
        assert await second.get("prefs", "theme") == {"dark": True}
    finally:
        await second.close()


@pytest.mark.asyncio
async def test_close_then_reopen_lazily(storage):
    await storage.set("test", "key", 1)
    await storage.close()
    assert storage.engine_mgr.is_open is False

    assert await storage.get("test", "key") == 1
    assert storage.engine_mgr.is_open is True


@pytest.mark.asyncio
async def test_close_without_open_is_noop(storage):
    await storage.close()
    await storage.close()
    assert storage.engine_mgr.is_open is False


@pytest.mark.asyncio
async def test_context_manager_opens_and_closes(data_dir, storage_config):
    async with SimpleStorage(data_dir=data_dir, config=storage_config) as store:
        assert store.engine_mgr.is_open is True
        await store.set("test", "key", "value")

    assert store.engine_mgr.is_open is False
    assert store.db_path.exists()


@pytest.mark.asyncio
@pytest.mark.parametrize("key", [1, None, b"bytes", ("a",)])
async def test_non_string_key_rejected(storage, key):
    with pytest.raises(InvalidKeyError):
        await storage.set("test", key, "v")
    with pytest.raises(InvalidKeyError):
        await storage.get("test", key)


@pytest.mark.asyncio
@pytest.mark.parametrize("table_name", ["", "sqlite_master", "SQLITE_sequence", None, 5])
async def test_invalid_table_rejected(storage, table_name):
    with pytest.raises(InvalidTableError):
        await storage.get(table_name, "k")


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [object(), {1, 2}, float("nan"), b"bytes"])
async def test_unserialisable_value_writes_nothing(storage, value):
    with pytest.raises(InvalidValueError):
        await storage.set("test", "key", value)

    assert await storage.has("test", "key") is False


def test_resolve_storage_path_accepts_callable(tmp_path, storage_config):
    """The data directory can be supplied lazily by the host."""
    path = resolve_storage_path(lambda: tmp_path / "lazy", storage_config)
    assert path == tmp_path / "lazy" / "simple_storage.sqlite"


def test_resolve_storage_path_uses_config(tmp_path, storage_config):
    storage_config.data_dir = str(tmp_path / "from_config")
    storage_config.filename = "other.sqlite"

    path = resolve_storage_path(None, storage_config)
    assert path == tmp_path / "from_config" / "other.sqlite"


@pytest.mark.asyncio
async def test_process_default_instance(data_dir):
    store = get_storage(data_dir)
    try:
        assert get_storage() is store
        assert store.db_path == data_dir / "simple_storage.sqlite"
        assert await store.set("test", "key", 1) is True
    finally:
        await reset_storage()

    assert store.engine_mgr.is_open is False
    assert get_storage(data_dir) is not store
    await reset_storage()
