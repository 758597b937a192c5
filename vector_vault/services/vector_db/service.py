"""Vector search service: validated writes, cache-aside reads, cosine search."""

import asyncio
from functools import partial
from typing import List, Optional, Sequence

import numpy as np
from loguru import logger

from vector_vault.exceptions import ValidationError
from vector_vault.services.vector_db.cache import VectorCache
from vector_vault.services.vector_db.record_store import RecordStore
from vector_vault.services.vector_db.similarity import cosine_similarities
from vector_vault.services.vector_db.types import (
    Metadata,
    ScoredVectorRecord,
    SearchOptions,
    StoreStats,
    VectorRecord,
)
from vector_vault.settings import VectorStoreConfig


def _rank(
    query: Sequence[float],
    embeddings: List[List[float]],
    threshold: float,
    limit: int,
) -> List[tuple]:
    """
    Score, filter and order candidates.

    :returns: (candidate position, similarity) pairs, best first
    """
    scores = cosine_similarities(query, embeddings)
    kept = np.flatnonzero(scores >= threshold)
    # stable: equal scores keep retrieval order
    order = kept[np.argsort(-scores[kept], kind="stable")]
    return [(int(i), float(scores[i])) for i in order[:limit]]


class VectorSearchService:
    """Stores vector records and ranks them against query embeddings."""

    def __init__(
        self,
        record_store: RecordStore,
        cache: VectorCache,
        config: VectorStoreConfig,
    ):
        """
        Initialize the service.

        :param record_store: canonical storage
        :param cache: best-effort cache of single records
        :param config: vector store options
        """
        self.record_store = record_store
        self.cache = cache
        self.config = config

    @property
    def dimensions(self) -> int:
        """Required embedding length."""
        return self.config.dimensions

    def _validate_embedding(
        self,
        embedding: Sequence[float],
        chunk_id: Optional[str] = None,
    ) -> None:
        actual = len(embedding)
        if actual == self.dimensions:
            return
        subject = f"chunk {chunk_id}" if chunk_id else "query"
        raise ValidationError(
            f"Invalid embedding dimensions for {subject}. "
            f"Expected {self.dimensions}, got {actual}",
            chunk_id=chunk_id,
            expected=self.dimensions,
            actual=actual,
        )

    async def store(self, record: VectorRecord) -> VectorRecord:
        """
        Store one record and cache it.

        :param record: record to store
        :returns: stored record including its id
        :raises ValidationError: if the embedding length is wrong
        """
        self._validate_embedding(record.embedding, record.chunk_id)
        stored = await self.record_store.insert(record)
        await self.cache.populate(stored)
        return stored

    async def store_batch(self, records: Sequence[VectorRecord]) -> List[VectorRecord]:
        """
        Store many records; nothing is written if any record is invalid.

        :param records: records to store
        :returns: stored records in input order
        :raises ValidationError: naming the first offending chunk
        """
        for record in records:
            self._validate_embedding(record.embedding, record.chunk_id)
        if not records:
            return []

        stored = await self.record_store.insert_batch(records)
        await asyncio.gather(*(self.cache.populate(record) for record in stored))
        logger.info(f"Stored batch of {len(stored)} vectors")
        return stored

    async def fetch(self, chunk_id: str) -> Optional[VectorRecord]:
        """
        Read one record, from the cache when possible.

        :param chunk_id: chunk identifier
        :returns: the record or None
        """
        cached = await self.cache.lookup(chunk_id)
        if cached is not None:
            return cached

        record = await self.record_store.get_by_chunk_id(chunk_id)
        if record is not None:
            await self.cache.populate(record)
        return record

    async def fetch_by_document(self, document_id: str) -> List[VectorRecord]:
        """All records of a document ordered by chunk index."""
        return await self.record_store.get_by_document_id(document_id)

    async def update_metadata(self, chunk_id: str, metadata: Metadata) -> bool:
        """
        Replace a record's metadata and drop its cached copy.

        :param chunk_id: chunk identifier
        :param metadata: new metadata
        :returns: False if no record has this chunk id
        """
        updated = await self.record_store.update_metadata(chunk_id, metadata)
        if updated:
            await self.cache.invalidate(chunk_id)
        return updated

    async def delete(self, chunk_id: str) -> bool:
        """
        Delete one record and drop its cached copy.

        :param chunk_id: chunk identifier
        :returns: whether a record was removed
        """
        deleted = await self.record_store.delete_by_chunk_id(chunk_id)
        if deleted:
            await self.cache.invalidate(chunk_id)
        return deleted

    async def delete_by_document(self, document_id: str) -> int:
        """
        Delete every record of a document and drop their cached copies.

        :param document_id: document identifier
        :returns: number of records removed from the store
        """
        deletion = await self.record_store.delete_by_document_id(document_id)
        await asyncio.gather(
            *(self.cache.invalidate(chunk_id) for chunk_id in deletion.chunk_ids)
        )
        logger.info(f"Deleted {deletion.count} vectors of document {document_id}")
        return deletion.count

    async def search(
        self,
        query_embedding: Sequence[float],
        options: Optional[SearchOptions] = None,
    ) -> List[ScoredVectorRecord]:
        """
        Rank stored records by cosine similarity to a query embedding.

        Every candidate matching the filters is scored; records under the
        threshold are dropped, the rest are ordered best first (ties keep
        retrieval order) and cut to the limit.

        Without content the results leave ``content`` unset, so callers
        dump them with ``exclude_unset=True`` to omit the field.

        :param query_embedding: query vector of length D
        :param options: limit, threshold, filters and content flag
        :returns: scored records, best first
        :raises ValidationError: if the query length is wrong
        """
        options = options or SearchOptions()
        self._validate_embedding(query_embedding)
        threshold = (
            self.config.similarity_threshold
            if options.threshold is None
            else options.threshold
        )

        candidates = await self.record_store.find(
            document_id=options.document_id,
            document_type=options.document_type,
        )
        scorable = []
        for candidate in candidates:
            if len(candidate.embedding) != self.dimensions:
                logger.warning(
                    f"Skipping chunk {candidate.chunk_id} with "
                    f"{len(candidate.embedding)} dimensions"
                )
                continue
            scorable.append(candidate)

        logger.debug(
            f"[VECTOR_DB] Scoring {len(scorable)} candidates, "
            f"threshold={threshold}, limit={options.limit}"
        )
        # Run in a separate thread to avoid blocking the event loop
        loop = asyncio.get_event_loop()
        ranked = await loop.run_in_executor(
            None,
            partial(
                _rank,
                list(query_embedding),
                [candidate.embedding for candidate in scorable],
                threshold,
                options.limit,
            ),
        )

        exclude = None if options.include_content else {"content"}
        return [
            ScoredVectorRecord(
                **scorable[position].model_dump(exclude=exclude),
                similarity=similarity,
            )
            for position, similarity in ranked
        ]

    async def stats(self) -> StoreStats:
        """Counts of records, documents and document types."""
        total_records = await self.record_store.count_all()
        document_ids = await self.record_store.distinct_document_ids()
        type_counts = await self.record_store.count_by_metadata_field("documentType")
        return StoreStats(
            total_records=total_records,
            unique_document_count=len(document_ids),
            type_distribution={
                None if doc_type is None else str(doc_type): count
                for doc_type, count in type_counts.items()
            },
            dimensions=self.dimensions,
        )
