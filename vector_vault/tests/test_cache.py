import asyncio

from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis

from vector_vault.exceptions import CacheError
from vector_vault.services.vector_db.cache import VectorCache
from vector_vault.tests.stubs import BrokenRedis


async def test_populate_writes_namespaced_key_with_expiry(cache, redis_client, make_record):
    record = make_record("c1").model_copy(update={"id": 7})

    assert await cache.populate(record)

    ttl = await redis_client.ttl("vector:c1")
    assert 0 < ttl <= 60
    assert '"chunkId":"c1"' in await redis_client.get("vector:c1")


async def test_lookup_returns_cached_record(cache, make_record):
    record = make_record("c1", metadata={"documentType": "faq", "score": 2}).model_copy(
        update={"id": 7}
    )
    await cache.populate(record)

    assert await cache.lookup("c1") == record
    assert cache.hits == 1


async def test_lookup_miss(cache):
    assert await cache.lookup("missing") is None
    assert cache.misses == 1
    assert cache.error_count == 0


async def test_invalidate_removes_entry(cache, redis_client, make_record):
    await cache.populate(make_record("c1"))

    assert await cache.invalidate("c1")
    assert await redis_client.get("vector:c1") is None
    assert await cache.lookup("c1") is None


async def test_undecodable_entry_is_a_reported_miss(
    cache,
    redis_client,
    cache_errors,
):
    await redis_client.set("vector:c1", "{not json")

    assert await cache.lookup("c1") is None
    assert len(cache_errors) == 1
    assert cache_errors[0].operation == "DECODE"


async def test_entry_expires_after_ttl(redis_client, make_record):
    cache = VectorCache(redis_client, prefix="vector:", ttl=1)
    await cache.populate(make_record("c1"))
    assert await cache.lookup("c1") is not None

    await asyncio.sleep(1.5)

    assert await cache.lookup("c1") is None
    assert await redis_client.get("vector:c1") is None


async def test_non_utf8_entry_is_a_reported_miss(cache_errors):
    server = FakeServer()
    raw_client = FakeRedis(server=server)
    cache = VectorCache(
        FakeRedis(server=server, decode_responses=True),
        prefix="vector:",
        error_listener=cache_errors.append,
    )
    await raw_client.set("vector:c1", b"\xff\xfe\x00bad")

    assert await cache.lookup("c1") is None
    assert cache.misses == 1
    assert [error.operation for error in cache_errors] == ["GET"]


async def test_failures_are_reported_not_raised(make_record):
    errors = []
    cache = VectorCache(BrokenRedis(), prefix="vector:", ttl=60, error_listener=errors.append)

    assert not await cache.populate(make_record("c1"))
    assert await cache.lookup("c1") is None
    assert not await cache.invalidate("c1")
    assert not await cache.ping()

    assert cache.error_count == 3
    assert [error.operation for error in errors] == ["SET", "GET", "DELETE"]
    assert all(isinstance(error, CacheError) for error in errors)
    assert errors[0].key == "vector:c1"


async def test_failing_listener_does_not_escape(make_record):
    def listener(error):
        raise RuntimeError("metrics backend down")

    cache = VectorCache(BrokenRedis(), error_listener=listener)

    assert not await cache.populate(make_record("c1"))
    assert cache.error_count == 1


async def test_ping(cache):
    assert await cache.ping()
