import pytest

from vector_vault.exceptions import StoreUnavailableError
from vector_vault.services.vector_db.lifetime import (
    init_vector_store,
    shutdown_vector_store,
    vector_store_lifespan,
)
from vector_vault.settings import Settings
from vector_vault.tests.stubs import BrokenRedis


def _settings(dsn: str) -> Settings:
    return Settings(
        db_dsn=dsn,
        db_connect_attempts=1,
        vector_dimensions=4,
        cache_ttl=30,
        cache_prefix="test:",
    )


async def test_lifespan_provides_a_working_service(tmp_path, redis_client, make_record):
    settings = _settings(f"sqlite+aiosqlite:///{tmp_path / 'vectors.db'}")

    async with vector_store_lifespan(settings, redis_client=redis_client) as service:
        assert service.dimensions == 4
        assert service.cache.prefix == "test:"
        stored = await service.store(make_record("c1"))
        assert await service.fetch("c1") == stored
        assert await redis_client.ttl("test:c1") <= 30


async def test_records_outlive_the_connections(tmp_path, make_record):
    settings = _settings(f"sqlite+aiosqlite:///{tmp_path / 'vectors.db'}")

    resources = await init_vector_store(settings, redis_client=BrokenRedis())
    stored = await resources.service.store(make_record("c1"))
    await shutdown_vector_store(resources)
    assert resources.redis_client.closed

    resources = await init_vector_store(settings, redis_client=BrokenRedis())
    try:
        assert await resources.service.fetch("c1") == stored
    finally:
        await shutdown_vector_store(resources)


async def test_unreachable_cache_does_not_block_startup(tmp_path, make_record):
    settings = _settings(f"sqlite+aiosqlite:///{tmp_path / 'vectors.db'}")

    async with vector_store_lifespan(settings, redis_client=BrokenRedis()) as service:
        await service.store(make_record("c1"))
        assert (await service.fetch("c1")).chunk_id == "c1"


async def test_failed_startup_releases_the_cache_client(tmp_path):
    settings = _settings(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'vectors.db'}")
    redis_client = BrokenRedis()

    with pytest.raises(StoreUnavailableError):
        await init_vector_store(settings, redis_client=redis_client)

    assert redis_client.closed


async def test_lifespan_releases_on_error(tmp_path):
    settings = _settings(f"sqlite+aiosqlite:///{tmp_path / 'vectors.db'}")
    redis_client = BrokenRedis()

    with pytest.raises(RuntimeError):
        async with vector_store_lifespan(settings, redis_client=redis_client):
            raise RuntimeError("caller failed")

    assert redis_client.closed
