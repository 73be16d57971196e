import asyncio
from datetime import timedelta

import pytest

from custom_components.yahoo_weather.cache import ExpiringCacheMap, InvalidKeyError, Producer

from .conftest import StubProducer

pytestmark = pytest.mark.asyncio


@pytest.fixture
def cache(clock):
    return ExpiringCacheMap(timedelta(seconds=10), clock=clock)


async def test_get_within_ttl_produces_once(cache):
    producer = StubProducer("x")
    cache.put("A", producer)

    first = await cache.get("A")
    second = await cache.get("A")

    assert first == second == "x"
    assert producer.calls == 1


async def test_put_does_not_invoke_producer(cache):
    producer = StubProducer("x")
    cache.put("A", producer)
    assert producer.calls == 0
    assert "A" in cache


async def test_expiry_scenario(cache, clock):
    producer = StubProducer("x", "y")
    cache.put("A", producer)

    assert await cache.get("A") == "x"

    clock.advance(5)
    assert await cache.get("A") == "x"
    assert producer.calls == 1

    clock.advance(6)
    assert await cache.get("A") == "y"
    assert producer.calls == 2
    assert await cache.get("A") == "y"
    assert producer.calls == 2


async def test_age_equal_to_ttl_is_still_fresh(cache, clock):
    producer = StubProducer("x", "y")
    cache.put("A", producer)
    await cache.get("A")

    clock.advance(10)
    assert await cache.get("A") == "x"
    assert producer.calls == 1


async def test_unknown_key_raises_invalid_key(cache):
    with pytest.raises(InvalidKeyError):
        await cache.get("missing")


async def test_invalid_key_is_a_key_error(cache):
    with pytest.raises(KeyError):
        cache.invalidate("missing")


async def test_failure_then_success_retries_on_next_call(cache):
    producer = StubProducer(RuntimeError("boom"), "fresh")
    cache.put("A", producer)

    assert await cache.get("A") is None
    assert await cache.get("A") == "fresh"
    assert producer.calls == 2


async def test_none_result_counts_as_failure(cache):
    producer = StubProducer(None, "fresh")
    cache.put("A", producer)

    assert await cache.get("A") is None
    assert await cache.get("A") == "fresh"


async def test_failure_after_expiry_does_not_return_stale_value(cache, clock):
    producer = StubProducer("old", RuntimeError("down"), "new")
    cache.put("A", producer)
    assert await cache.get("A") == "old"

    clock.advance(11)
    assert await cache.get("A") is None
    # Entry kept its old timestamp, so it is still stale and retried at once
    assert await cache.get("A") == "new"
    assert producer.calls == 3


async def test_invalidate_forces_production(cache):
    producer = StubProducer("x", "y")
    cache.put("A", producer)
    await cache.get("A")

    cache.invalidate("A")

    assert await cache.get("A") == "y"
    assert producer.calls == 2


async def test_invalidate_all(cache):
    a = StubProducer("a1", "a2")
    b = StubProducer("b1", "b2")
    cache.put("A", a)
    cache.put("B", b)
    await cache.get("A")
    await cache.get("B")

    cache.invalidate_all()

    assert await cache.get("A") == "a2"
    assert await cache.get("B") == "b2"


async def test_refresh_produces_even_when_fresh(cache):
    producer = StubProducer("x", "y")
    cache.put("A", producer)
    await cache.get("A")

    assert await cache.refresh("A") == "y"


async def test_put_replaces_producer_and_drops_value(cache):
    cache.put("A", StubProducer("x"))
    await cache.get("A")

    replacement = StubProducer("z")
    cache.put("A", replacement)

    assert await cache.get("A") == "z"
    assert replacement.calls == 1


async def test_put_value_seeds_entry(cache, clock):
    producer = StubProducer("produced")
    cache.put("A", producer)

    cache.put_value("A", "seeded")
    assert await cache.get("A") == "seeded"
    assert producer.calls == 0

    clock.advance(11)
    assert await cache.get("A") == "produced"


async def test_put_value_unknown_key(cache):
    with pytest.raises(InvalidKeyError):
        cache.put_value("missing", "value")


async def test_remove(cache):
    cache.put("A", StubProducer("x"))
    cache.remove("A")

    assert "A" not in cache
    with pytest.raises(InvalidKeyError):
        await cache.get("A")


async def test_concurrent_gets_share_one_production(cache):
    class SlowProducer(Producer):
        def __init__(self):
            self.calls = 0
            self.release = asyncio.Event()

        async def async_produce(self):
            self.calls += 1
            await self.release.wait()
            return f"value-{self.calls}"

    producer = SlowProducer()
    cache.put("A", producer)

    tasks = [asyncio.ensure_future(cache.get("A")) for _ in range(5)]
    await asyncio.sleep(0)
    producer.release.set()
    results = await asyncio.gather(*tasks)

    assert producer.calls == 1
    assert results == ["value-1"] * 5


async def test_keys_are_independent(cache):
    a = StubProducer("a")
    b = StubProducer("b")
    cache.put("A", a)
    cache.put("B", b)

    assert await cache.get("A") == "a"
    assert await cache.get("B") == "b"
    assert a.calls == b.calls == 1


async def test_ttl_must_be_positive():
    with pytest.raises(ValueError):
        ExpiringCacheMap(timedelta(0))


async def test_concurrent_gets_share_one_failed_production(cache):
    class FailingProducer(Producer):
        def __init__(self):
            self.calls = 0
            self.release = asyncio.Event()

        async def async_produce(self):
            self.calls += 1
            await self.release.wait()
            raise RuntimeError("timeout")

    producer = FailingProducer()
    cache.put("A", producer)

    tasks = [asyncio.ensure_future(cache.get("A")) for _ in range(5)]
    await asyncio.sleep(0)
    producer.release.set()
    results = await asyncio.gather(*tasks)

    assert producer.calls == 1
    assert results == [None] * 5

    # The next read is a new attempt
    assert await cache.get("A") is None
    assert producer.calls == 2
