import pytest

from identity_server.core.cache import NETWORK_STATUS_KEY, CacheService, cache_key
from identity_server.core.config import CacheSettings


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return CacheService(CacheSettings(), clock=clock)


def test_entries_expire_after_ttl(cache, clock):
    cache.set("balance:abc", 42, ttl=30)
    assert cache.get("balance:abc") == 42
    assert cache.get_ttl("balance:abc") == 30

    clock.advance(29)
    assert cache.has("balance:abc")

    clock.advance(1)
    assert cache.get("balance:abc") is None
    assert cache.get_ttl("balance:abc") is None


def test_default_ttl_comes_from_settings(clock):
    cache = CacheService(CacheSettings(balance_ttl=5), clock=clock)
    cache.set("k", "v")
    assert cache.get_ttl("k") == 5


def test_stats_count_hits_misses_and_keys(cache):
    cache.set("a", 1)
    cache.get("a")
    cache.get("missing")
    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["keys"] == 1


def test_purge_and_flush(cache, clock):
    cache.set("short", 1, ttl=1)
    cache.set("long", 2, ttl=100)
    clock.advance(2)
    assert cache.purge_expired() == 1
    assert cache.keys() == ["long"]

    cache.flush()
    assert cache.keys() == []


@pytest.mark.anyio
async def test_get_or_compute_calls_compute_once_per_miss(cache, clock):
    calls = []

    async def compute():
        calls.append(1)
        return {"lamports": 5}

    first = await cache.get_or_compute("balance:w", 30, compute)
    second = await cache.get_or_compute("balance:w", 30, compute)
    assert first == second == {"lamports": 5}
    assert len(calls) == 1

    clock.advance(31)
    await cache.get_or_compute("balance:w", 30, compute)
    assert len(calls) == 2


@pytest.mark.anyio
async def test_get_or_compute_accepts_sync_callables_and_skips_none(cache):
    assert await cache.get_or_compute("profile:w", 30, lambda: "value") == "value"
    assert cache.has("profile:w")

    assert await cache.get_or_compute("profile:none", 30, lambda: None) is None
    assert not cache.has("profile:none")


def test_invalidate_is_scoped_to_one_wallet(cache):
    wallet = "WalletA"
    for key in (
        cache_key("balance", wallet),
        cache_key("tokens", wallet),
        cache_key("profile", wallet),
        cache_key("transactions", wallet, "live", 20),
        cache_key("transactions", wallet, "stats", "-", "-"),
        cache_key("balance", "WalletAB"),
        cache_key("balance", "WalletB"),
        NETWORK_STATUS_KEY,
    ):
        cache.set(key, "x")

    assert cache.invalidate(wallet) == 5
    assert sorted(cache.keys()) == sorted(["balance:WalletAB", "balance:WalletB", NETWORK_STATUS_KEY])


def test_expired_entries_are_purged_on_write(cache, clock):
    for index in range(1000):
        cache.set(f"balance:wallet-{index}", index, ttl=1)

    clock.advance(10_000)
    cache.set("balance:fresh", "value", ttl=30)
    assert cache.get("balance:fresh") == "value"

    assert len(cache._store) == 1
    assert cache.stats()["keys"] == 1


def test_stats_count_only_live_keys(cache, clock):
    cache.set("balance:short", 1, ttl=5)
    cache.set("balance:long", 2, ttl=60)
    clock.advance(10)

    assert cache.stats()["keys"] == 1
    assert cache.keys() == ["balance:long"]
