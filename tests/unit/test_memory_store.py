"""Tests for MemoryStore (fallback store): TTL, patterns, sets, sweep."""

import asyncio

import pytest

from afrikmode.infrastructure.cache.memory_store import MemoryStore
from afrikmode.infrastructure.cache.sweeper import run_fallback_sweep


@pytest.fixture
def store(clock) -> MemoryStore:
    return MemoryStore(clock=clock)


async def test_get_missing_key_returns_none(store: MemoryStore) -> None:
    assert await store.get("nope") is None


async def test_set_then_get_returns_payload(store: MemoryStore) -> None:
    await store.set("a", '{"x": 1}', ttl=60)
    assert await store.get("a") == '{"x": 1}'


async def test_entry_expires_after_ttl(store: MemoryStore, clock) -> None:
    """Expired entries read as absent and are dropped lazily."""
    await store.set("a", "1", ttl=1)
    clock.advance(0.5)
    assert await store.get("a") == "1"
    clock.advance(0.6)
    assert await store.get("a") is None
    assert await store.exists("a") is False
    assert store.size() == 0


async def test_ttl_none_or_zero_never_expires(store: MemoryStore, clock) -> None:
    await store.set("forever", "1", ttl=None)
    await store.set("zero", "1", ttl=0)
    clock.advance(10**6)
    assert await store.get("forever") == "1"
    assert await store.get("zero") == "1"


async def test_delete_reports_whether_key_existed(store: MemoryStore, clock) -> None:
    await store.set("a", "1", ttl=1)
    assert await store.delete("a") is True
    assert await store.delete("a") is False
    await store.set("b", "1", ttl=1)
    clock.advance(2)
    assert await store.delete("b") is False


async def test_keys_supports_trailing_wildcard_and_globs(store: MemoryStore) -> None:
    await store.set("user:1", "a")
    await store.set("user:2", "b")
    await store.set("cart:1", "c")
    assert sorted(await store.keys("user:*")) == ["user:1", "user:2"]
    assert sorted(await store.keys()) == ["cart:1", "user:1", "user:2"]
    assert await store.keys("?art:1") == ["cart:1"]
    assert await store.keys("nothing*") == []


async def test_keys_skips_expired_entries(store: MemoryStore, clock) -> None:
    await store.set("short", "a", ttl=1)
    await store.set("long", "b", ttl=100)
    clock.advance(5)
    assert await store.keys() == ["long"]


async def test_delete_pattern_removes_matches_only(store: MemoryStore) -> None:
    await store.set("product:1:views", "3")
    await store.set("product:2:views", "4")
    await store.set("products", "[]")
    assert await store.delete_pattern("product:*") == 2
    assert await store.keys() == ["products"]


async def test_flush_removes_everything(store: MemoryStore) -> None:
    await store.set("a", "1")
    await store.sadd("s", "x")
    await store.flush()
    assert store.size() == 0
    assert await store.exists("a") is False


class TestSets:
    """Set commands mirror SADD/SREM/SMEMBERS/SISMEMBER/SCARD."""

    async def test_sadd_counts_only_new_members(self, store: MemoryStore) -> None:
        assert await store.sadd("s", "a", "b") == 2
        assert await store.sadd("s", "b", "c") == 1
        assert await store.smembers("s") == {"a", "b", "c"}
        assert await store.scard("s") == 3

    async def test_srem_and_sismember(self, store: MemoryStore) -> None:
        await store.sadd("s", "a", "b")
        assert await store.srem("s", "a", "zzz") == 1
        assert await store.sismember("s", "a") is False
        assert await store.sismember("s", "b") is True

    async def test_removing_last_member_deletes_key(self, store: MemoryStore) -> None:
        await store.sadd("s", "a")
        await store.srem("s", "a")
        assert await store.exists("s") is False

    async def test_missing_set_reads_empty(self, store: MemoryStore) -> None:
        assert await store.smembers("none") == set()
        assert await store.scard("none") == 0
        assert await store.srem("none", "a") == 0

    async def test_string_key_reads_as_empty_set(self, store: MemoryStore) -> None:
        await store.set("k", "payload")
        assert await store.smembers("k") == set()
        await store.sadd("k", "a")
        assert await store.get("k") is None
        assert await store.smembers("k") == {"a"}


async def test_sweep_expired_drops_only_expired(store: MemoryStore, clock) -> None:
    await store.set("old", "1", ttl=1)
    await store.set("new", "1", ttl=100)
    clock.advance(10)
    assert store.sweep_expired() == 1
    assert store.size() == 1


async def test_run_fallback_sweep_sweeps_until_cancelled(store: MemoryStore, clock) -> None:
    await store.set("old", "1", ttl=1)
    clock.advance(10)
    task = asyncio.create_task(run_fallback_sweep(store, 0.01))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert store.sweep_expired() == 0
    assert await store.keys() == []


async def test_clear_drops_everything_and_counts(store: MemoryStore) -> None:
    await store.set("a", "1")
    await store.sadd("s", "x")
    assert store.clear() == 2
    assert await store.keys() == []
