"""Creation and release of the vector store connections."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from loguru import logger
from redis.asyncio import Redis
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from vector_vault.db.base import Base
from vector_vault.db.models import load_all_models
from vector_vault.exceptions import StoreUnavailableError
from vector_vault.services.vector_db.cache import VectorCache
from vector_vault.services.vector_db.record_store import RecordStore
from vector_vault.services.vector_db.service import VectorSearchService
from vector_vault.settings import Settings


class VectorStoreResources:
    """Process-wide connections of the vector store and the service using them."""

    def __init__(
        self,
        engine: AsyncEngine,
        redis_client: Redis,
        service: VectorSearchService,
    ):
        self.engine = engine
        self.redis_client = redis_client
        self.service = service


async def _verify_database(engine: AsyncEngine, attempts: int) -> None:
    """
    Wait until the database accepts connections.

    :param engine: SQLAlchemy engine
    :param attempts: connection attempts before giving up
    :raises StoreUnavailableError: if every attempt failed
    """
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(1, attempts)),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(
                (SQLAlchemyError, OSError, asyncio.TimeoutError)
            ),
            reraise=True,
        ):
            with attempt:
                async with engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
        raise StoreUnavailableError(f"Database is not reachable: {e}") from e


async def _create_tables(engine: AsyncEngine) -> None:
    """Create database tables based on model definitions if they don't exist."""
    load_all_models()
    logger.info("Creating database tables if they don't exist...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def _release(engine: Optional[AsyncEngine], redis_client: Optional[Redis]) -> None:
    if redis_client is not None:
        try:
            await redis_client.aclose()
        except Exception as e:
            logger.error(f"Failed to close cache connection: {e}")
    if engine is not None:
        await engine.dispose()


async def init_vector_store(
    settings: Settings,
    redis_client: Optional[Redis] = None,
) -> VectorStoreResources:
    """
    Open the database and cache connections and build the service.

    A cache that does not answer is logged and tolerated, the
    database must be reachable. Whatever was opened before a failure
    is released again.

    :param settings: application settings
    :param redis_client: cache client to use instead of one built from settings,
        owned by the returned resources
    :returns: resources to hand to `shutdown_vector_store`
    """
    engine: Optional[AsyncEngine] = None
    config = settings.vector_config()
    try:
        engine = create_async_engine(settings.sqlalchemy_url, echo=settings.db_echo)
        await _verify_database(engine, settings.db_connect_attempts)
        await _create_tables(engine)

        if redis_client is None:
            redis_client = Redis.from_url(
                str(settings.redis_url),
                decode_responses=True,
                socket_timeout=settings.redis_timeout,
                socket_connect_timeout=settings.redis_timeout,
            )
        cache = VectorCache(
            client=redis_client,
            prefix=config.cache_prefix,
            ttl=config.cache_ttl,
        )
        if not await cache.ping():
            logger.warning("Cache is not reachable, serving from the database only")

        session_factory = async_sessionmaker(engine, expire_on_commit=False)
        service = VectorSearchService(
            record_store=RecordStore(session_factory, dimensions=config.dimensions),
            cache=cache,
            config=config,
        )
    except BaseException:
        await _release(engine, redis_client)
        raise

    logger.info(f"Vector store initialized with {config.dimensions} dimensions")
    return VectorStoreResources(engine, redis_client, service)


async def shutdown_vector_store(resources: VectorStoreResources) -> None:
    """
    Close the connections opened by `init_vector_store`.

    :param resources: resources to release
    """
    await _release(resources.engine, resources.redis_client)
    logger.info("Vector store connections closed")


@asynccontextmanager
async def vector_store_lifespan(
    settings: Settings,
    redis_client: Optional[Redis] = None,
) -> AsyncIterator[VectorSearchService]:
    """
    Scope the vector store connections to a block.

    :param settings: application settings
    :param redis_client: optional cache client, see `init_vector_store`
    :yields: ready vector search service
    """
    resources = await init_vector_store(settings, redis_client=redis_client)
    try:
        yield resources.service
    finally:
        await shutdown_vector_store(resources)
