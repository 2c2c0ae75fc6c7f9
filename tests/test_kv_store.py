"""Tests for the keyed record store and its counters."""

from __future__ import annotations

import sqlite3
import threading

import pytest

from coverdrop_app.repositories import db_pool
from coverdrop_app.repositories.db_pool import ThreadLocalConnection
from coverdrop_app.repositories.kv_store import KeyValueStore
from coverdrop_app.repositories.schema import initialize_schema


@pytest.fixture
def store(config) -> KeyValueStore:
    pool = ThreadLocalConnection(config)
    initialize_schema(pool)
    return KeyValueStore(pool)


def test_put_get_and_overwrite_keep_insertion_order(store) -> None:
    store.put("drops", 1, {"name": "first"})
    store.put("drops", 2, {"name": "second"})
    store.put("drops", 1, {"name": "first, renamed"})

    assert store.get("drops", 1) == {"name": "first, renamed"}
    assert store.get("drops", 3) is None
    assert [key for key, _ in store.iterate("drops")] == ["1", "2"]


def test_collections_are_isolated(store) -> None:
    store.put("drops", 1, {"kind": "drop"})
    store.put("policies", 1, {"kind": "policy"})

    assert store.get("drops", 1) == {"kind": "drop"}
    assert list(store.iterate("notifications")) == []


def test_counters_start_at_one_and_are_independent(store) -> None:
    assert store.next_id("policy") == 1
    assert store.next_id("policy") == 2
    assert store.next_id("claim") == 1


def test_transaction_rolls_back_on_error(store) -> None:
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.put("drops", 1, {"name": "ghost"})
            store.next_id("drop")
            raise RuntimeError("boom")

    assert store.get("drops", 1) is None
    assert store.next_id("drop") == 1


def test_nested_transactions_commit_once(store) -> None:
    with store.transaction():
        store.put("drops", 1, {"name": "outer"})
        with store.transaction():
            store.put("drops", 2, {"name": "inner"})

    assert [key for key, _ in store.iterate("drops")] == ["1", "2"]


def test_concurrent_id_allocation_is_unique(store) -> None:
    allocated: list[int] = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(20):
            value = store.next_id("notification")
            with lock:
                allocated.append(value)

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(allocated) == list(range(1, 101))


def test_close_all_closes_every_thread_connection(config) -> None:
    pool = ThreadLocalConnection(config)
    opened = [pool.get_connection()]

    def _open() -> None:
        opened.append(pool.get_connection())

    workers = [threading.Thread(target=_open) for _ in range(3)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()
    assert len({id(connection) for connection in opened}) == 4

    pool.close_all()

    closed_errors: tuple[type[Exception], ...] = (sqlite3.ProgrammingError,)
    if db_pool.SQLCIPHER_AVAILABLE:
        closed_errors += (db_pool.sqlcipher.ProgrammingError,)
    for connection in opened:
        with pytest.raises(closed_errors):
            connection.execute("SELECT 1")

    fresh = pool.get_connection()
    assert fresh not in opened
    assert fresh.execute("SELECT 1").fetchone()[0] == 1
    pool.close_all()
