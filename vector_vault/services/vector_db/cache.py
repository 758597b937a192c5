"""Redis cache-aside layer for vector records."""

from typing import Callable, Optional

import pydantic
from loguru import logger
from redis.asyncio import Redis

from vector_vault.exceptions import CacheError
from vector_vault.services.vector_db.types import VectorRecord


ErrorListener = Callable[[CacheError], None]


class VectorCache:
    """
    Best-effort cache of vector records keyed by chunk id.

    The cache is never authoritative. A failing call is logged,
    counted and handed to the error listener, never raised.
    """

    def __init__(
        self,
        client: Redis,
        prefix: str = "vector:",
        ttl: int = 3600,
        error_listener: Optional[ErrorListener] = None,
    ):
        """
        Initialize the cache.

        :param client: redis asyncio client
        :param prefix: namespace prepended to chunk ids
        :param ttl: entry lifetime in seconds
        :param error_listener: called with every reported CacheError
        """
        self.client = client
        self.prefix = prefix
        self.ttl = ttl
        self.error_listener = error_listener
        self.hits = 0
        self.misses = 0
        self.error_count = 0

    def key(self, chunk_id: str) -> str:
        """Cache key of a chunk."""
        return f"{self.prefix}{chunk_id}"

    def _report(self, operation: str, key: str, cause: BaseException) -> None:
        error = CacheError(operation, key, cause)
        self.error_count += 1
        logger.warning(str(error))
        if self.error_listener is not None:
            try:
                self.error_listener(error)
            except Exception as e:
                logger.error(f"Cache error listener failed: {e}")

    async def populate(self, record: VectorRecord) -> bool:
        """
        Store a record with the configured expiry.

        :param record: stored record
        :returns: True if the entry was written
        """
        key = self.key(record.chunk_id)
        try:
            await self.client.set(
                key,
                record.model_dump_json(by_alias=True),
                ex=self.ttl,
            )
        except Exception as e:
            self._report("SET", key, e)
            return False

        logger.debug(f"[VECTOR_DB] Cache SET for key: {key} (TTL: {self.ttl}s)")
        return True

    async def lookup(self, chunk_id: str) -> Optional[VectorRecord]:
        """
        Read a cached record.

        :param chunk_id: chunk identifier
        :returns: the record, or None on a miss or failure
        """
        key = self.key(chunk_id)
        try:
            cached = await self.client.get(key)
        except Exception as e:
            self._report("GET", key, e)
            self.misses += 1
            return None

        if cached is None:
            logger.debug(f"[VECTOR_DB] Cache MISS for key: {key}")
            self.misses += 1
            return None

        try:
            record = VectorRecord.model_validate_json(cached)
        except pydantic.ValidationError as e:
            self._report("DECODE", key, e)
            self.misses += 1
            return None

        logger.debug(f"[VECTOR_DB] Cache HIT for key: {key}")
        self.hits += 1
        return record

    async def invalidate(self, chunk_id: str) -> bool:
        """
        Drop a cached record.

        :param chunk_id: chunk identifier
        :returns: False if the delete failed
        """
        key = self.key(chunk_id)
        try:
            await self.client.delete(key)
        except Exception as e:
            self._report("DELETE", key, e)
            return False

        logger.debug(f"[VECTOR_DB] Cache DELETE for key: {key}")
        return True

    async def ping(self) -> bool:
        """Check that the cache server answers."""
        try:
            return bool(await self.client.ping())
        except Exception as e:
            logger.warning(f"Cache ping failed: {e}")
            return False
