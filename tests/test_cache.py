import fnmatch

import pytest
import redis

from gigplanner import cache as cache_module
from gigplanner.cache import Cache, reference_key


class FakeRedis:
    """Just enough of the redis client for the cache wrapper"""

    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value

    def delete(self, *keys):
        removed = 0
        for key in keys:
            removed += self.store.pop(key, None) is not None
        return removed

    def scan_iter(self, match):
        return [key for key in list(self.store) if fnmatch.fnmatch(key, match)]


@pytest.fixture
def fake_cache(monkeypatch):
    fake = Cache(enabled=True)
    fake.redis_client = FakeRedis()
    monkeypatch.setattr(cache_module, "cache", fake)
    monkeypatch.setattr("gigplanner.domain.reference.service.cache", fake)
    return fake


def test_reference_key() -> None:
    assert reference_key("musicians") == "musicians:list"
    assert reference_key("pay_rates", "musician", 3) == "pay_rates:musician:3"


def test_round_trip_and_pattern_delete(fake_cache) -> None:
    fake_cache.set("venues:list", [{"id": 1}])
    fake_cache.set("venues:1", {"id": 1})
    fake_cache.set("musicians:list", [])

    assert fake_cache.get("venues:list") == [{"id": 1}]
    assert fake_cache.delete_pattern("venues:*") == 2
    assert fake_cache.get("venues:list") is None
    assert fake_cache.get("musicians:list") == []


def test_venue_list_is_cached_and_invalidated_on_write(client, fake_cache, make_venue) -> None:
    make_venue(name="The Jazz Cellar")

    assert [v["name"] for v in client.get("/api/venues").json()] == ["The Jazz Cellar"]
    assert "venues:list" in fake_cache.redis_client.store

    client.post("/api/venues", json={"name": "Soundwave Lounge"})

    assert "venues:list" not in fake_cache.redis_client.store
    names = [v["name"] for v in client.get("/api/venues").json()]
    assert names == ["Soundwave Lounge", "The Jazz Cellar"]


def test_cache_fails_open_when_redis_is_down(monkeypatch) -> None:
    def unreachable():
        raise redis.ConnectionError("connection refused")

    monkeypatch.setattr(cache_module, "get_redis_client", unreachable)
    broken = Cache(enabled=True)

    assert broken.get("venues:list") is None
    assert broken.set("venues:list", []) is False
    assert broken.delete_pattern("venues:*") == 0


def test_disabled_cache_is_a_no_op() -> None:
    disabled = Cache(enabled=False)
    assert disabled.set("venues:list", []) is False
    assert disabled.get("venues:list") is None
