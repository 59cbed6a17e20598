import asyncio

import pytest

from tally.shared.core.configuration import StoreConfig
from tally.shared.core.errors import StoreWriteError
from tally.shared.infrastructure.persistence import (
    DuckDBStateStore,
    MemoryStateStore,
    create_state_store,
)


def test_missing_key_returns_caller_default():
    store = MemoryStateStore()
    assert store.get("widget_current_count") is None
    assert store.get("widget_current_count", 7) == 7
    assert store.get_int("widget_current_count") == 0
    assert store.get_str("widget_product_id") == ""
    assert not store.contains("widget_product_id")


def test_last_write_wins():
    store = MemoryStateStore()
    store.set("widget_action", "increase")
    store.set("widget_action", "reset")
    assert store.get("widget_action") == "reset"
    assert store.writes == [("widget_action", "increase"), ("widget_action", "reset")]


def test_get_int_tolerates_garbage():
    store = MemoryStateStore({"widget_current_count": "lots"})
    assert store.get_int("widget_current_count", 3) == 3


def test_memory_store_can_refuse_writes():
    store = MemoryStateStore()
    store.fail_writes = True
    with pytest.raises(StoreWriteError):
        store.set("widget_action", "increase")
    assert store.get("widget_action") is None


def test_duckdb_write_is_readable_before_flush():
    store = DuckDBStateStore(":memory:")
    store.set("widget_product_name", "Socks")
    assert store.get("widget_product_name") == "Socks"
    assert store.pending_writes == 1
    assert store.flush() == 1
    assert store.pending_writes == 0
    store.close()


def test_duckdb_values_survive_reopen(tmp_path):
    db_path = str(tmp_path / "state.duckdb")
    store = DuckDBStateStore(db_path)
    store.set("widget_product_name", "Hat")
    store.set("widget_current_count", 12)
    store.set("widget_action", "decrease")
    store.remove("widget_action")
    store.close()

    reopened = DuckDBStateStore(db_path)
    assert reopened.get("widget_product_name") == "Hat"
    assert reopened.get_int("widget_current_count") == 12
    assert reopened.get("widget_action") is None
    reopened.close()


def test_duckdb_unflushed_remove_of_missing_key_is_noop():
    store = DuckDBStateStore(":memory:")
    store.remove("never_written")
    assert store.pending_writes == 0
    store.close()


def test_duckdb_rejects_unserializable_value():
    store = DuckDBStateStore(":memory:")
    with pytest.raises(StoreWriteError):
        store.set("widget_product_name", object())
    assert store.get("widget_product_name") is None
    store.close()


def test_duckdb_closed_store_rejects_writes():
    store = DuckDBStateStore(":memory:")
    store.close()
    with pytest.raises(StoreWriteError):
        store.set("widget_action", "reset")


async def test_background_flush_persists_writes(tmp_path):
    db_path = str(tmp_path / "state.duckdb")
    store = DuckDBStateStore(db_path, flush_interval=0.01)
    store.start_flush()
    store.set("widget_current_count", 4)
    for _ in range(100):
        if store.pending_writes == 0:
            break
        await asyncio.sleep(0.01)
    assert store.pending_writes == 0

    row = store.conn.execute(
        "SELECT value_json FROM shared_state WHERE key = 'widget_current_count'"
    ).fetchone()
    assert row == ("4",)
    store.close()


def test_factory_picks_backend(tmp_path):
    assert isinstance(create_state_store(StoreConfig(backend="memory")), MemoryStateStore)
    store = create_state_store(StoreConfig(backend="duckdb", db_path=str(tmp_path / "s.duckdb")))
    assert isinstance(store, DuckDBStateStore)
    store.close()
