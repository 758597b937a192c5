from typing import Any, Dict, List, Optional

import pytest
from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from vector_vault.db.base import Base
from vector_vault.db.models import load_all_models
from vector_vault.exceptions import CacheError
from vector_vault.services.vector_db.cache import VectorCache
from vector_vault.services.vector_db.record_store import RecordStore
from vector_vault.services.vector_db.service import VectorSearchService
from vector_vault.services.vector_db.types import VectorRecord
from vector_vault.settings import VectorStoreConfig

DIMENSIONS = 4


@pytest.fixture
def config() -> VectorStoreConfig:
    return VectorStoreConfig(
        dimensions=DIMENSIONS,
        similarity_threshold=0.7,
        cache_ttl=60,
        cache_prefix="vector:",
    )


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'vectors.db'}")
    load_all_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def record_store(session_factory, config) -> RecordStore:
    return RecordStore(session_factory, dimensions=config.dimensions)


@pytest.fixture
async def redis_client():
    client = FakeRedis(server=FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def cache_errors() -> List[CacheError]:
    return []


@pytest.fixture
def cache(redis_client, config, cache_errors) -> VectorCache:
    return VectorCache(
        client=redis_client,
        prefix=config.cache_prefix,
        ttl=config.cache_ttl,
        error_listener=cache_errors.append,
    )


@pytest.fixture
def service(record_store, cache, config) -> VectorSearchService:
    return VectorSearchService(record_store=record_store, cache=cache, config=config)


@pytest.fixture
def make_record():
    """Factory of unsaved vector records."""

    def _make(
        chunk_id: str,
        document_id: str = "D1",
        chunk_index: int = 0,
        embedding: Optional[List[float]] = None,
        content: Optional[str] = "some text",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> VectorRecord:
        return VectorRecord(
            document_id=document_id,
            chunk_id=chunk_id,
            chunk_index=chunk_index,
            content=content,
            embedding=embedding if embedding is not None else [1.0, 0.0, 0.0, 0.0],
            metadata=metadata or {},
        )

    return _make
