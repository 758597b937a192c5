"""Record store adapter over the SQLAlchemy async engine."""

import asyncio
import functools
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Set

from loguru import logger
from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vector_vault.db.models.vectors import VectorChunk
from vector_vault.exceptions import (
    DuplicateChunkError,
    StoreUnavailableError,
    ValidationError,
)
from vector_vault.services.vector_db.types import (
    DocumentDeletion,
    Metadata,
    VectorRecord,
)

# Stamps written at insert that survive a metadata replace
SYSTEM_METADATA_KEYS = ("createdAt", "dimensions")


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _store_call(operation: str):
    """
    Raise engine failures of the wrapped call as StoreUnavailableError.

    :param operation: name used in log and error messages
    """

    def decorator(method):
        @functools.wraps(method)
        async def wrapper(*args, **kwargs):
            try:
                return await method(*args, **kwargs)
            except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
                logger.error(f"Record store {operation} failed: {e}")
                raise StoreUnavailableError(
                    f"Record store {operation} failed: {e}"
                ) from e

        return wrapper

    return decorator


def _to_record(row: VectorChunk) -> VectorRecord:
    return VectorRecord(
        id=row.id,
        document_id=row.document_id,
        chunk_id=row.chunk_id,
        chunk_index=row.chunk_index,
        content=row.content,
        embedding=row.embedding,
        metadata=dict(row.metadata_ or {}),
    )


class RecordStore:
    """Canonical storage of vector records."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dimensions: int,
    ):
        """
        Initialize the record store.

        :param session_factory: factory of async sessions bound to the engine
        :param dimensions: required embedding length
        """
        self._session_factory = session_factory
        self.dimensions = dimensions

    def check_dimensions(self, record: VectorRecord) -> None:
        """
        Ensure the record's embedding has the configured length.

        :param record: record about to be written
        :raises ValidationError: if the length differs
        """
        actual = len(record.embedding)
        if actual != self.dimensions:
            raise ValidationError(
                f"Invalid embedding dimensions for chunk {record.chunk_id}. "
                f"Expected {self.dimensions}, got {actual}",
                chunk_id=record.chunk_id,
                expected=self.dimensions,
                actual=actual,
            )

    def _to_row(self, record: VectorRecord, created_at: str) -> VectorChunk:
        metadata = dict(record.metadata)
        metadata["createdAt"] = created_at
        metadata["dimensions"] = self.dimensions
        return VectorChunk(
            document_id=record.document_id,
            chunk_id=record.chunk_id,
            chunk_index=record.chunk_index,
            content=record.content,
            embedding=list(record.embedding),
            metadata_=metadata,
        )

    @_store_call("insert")
    async def insert(self, record: VectorRecord) -> VectorRecord:
        """
        Persist a single record.

        :param record: record without id
        :returns: stored record with id and stamped metadata
        :raises ValidationError: if the embedding length is wrong
        :raises DuplicateChunkError: if the chunk id is taken
        """
        self.check_dimensions(record)
        row = self._to_row(record, _utcnow())

        async with self._session_factory() as session:
            try:
                async with session.begin():
                    session.add(row)
                    await session.flush()
                    stored = _to_record(row)
            except IntegrityError as e:
                raise DuplicateChunkError(record.chunk_id) from e

        logger.debug(f"[VECTOR_DB] Inserted chunk {stored.chunk_id} (id={stored.id})")
        return stored

    @_store_call("batch insert")
    async def insert_batch(self, records: Sequence[VectorRecord]) -> List[VectorRecord]:
        """
        Persist many records in one transaction.

        Every record is validated before anything is written.

        :param records: records without ids
        :returns: stored records in input order
        :raises ValidationError: naming the first offending chunk
        :raises DuplicateChunkError: if a chunk id repeats or is taken
        """
        seen: Set[str] = set()
        for record in records:
            self.check_dimensions(record)
            if record.chunk_id in seen:
                raise DuplicateChunkError(record.chunk_id)
            seen.add(record.chunk_id)

        if not records:
            return []

        created_at = _utcnow()
        rows = [self._to_row(record, created_at) for record in records]

        async with self._session_factory() as session:
            try:
                async with session.begin():
                    session.add_all(rows)
                    await session.flush()
                    stored = [_to_record(row) for row in rows]
            except IntegrityError as e:
                raise DuplicateChunkError() from e

        logger.debug(f"[VECTOR_DB] Inserted batch of {len(stored)} chunks")
        return stored

    @_store_call("lookup")
    async def get_by_chunk_id(self, chunk_id: str) -> Optional[VectorRecord]:
        """
        Point lookup by chunk id.

        :param chunk_id: chunk identifier
        :returns: the record or None
        """
        async with self._session_factory() as session:
            row = await session.scalar(
                select(VectorChunk).where(VectorChunk.chunk_id == chunk_id)
            )
            return _to_record(row) if row is not None else None

    @_store_call("document lookup")
    async def get_by_document_id(self, document_id: str) -> List[VectorRecord]:
        """
        All records of a document, ascending by chunk index.

        :param document_id: document identifier
        :returns: ordered records, empty if the document is unknown
        """
        async with self._session_factory() as session:
            rows = await session.scalars(
                select(VectorChunk)
                .where(VectorChunk.document_id == document_id)
                .order_by(VectorChunk.chunk_index, VectorChunk.id)
            )
            return [_to_record(row) for row in rows]

    @_store_call("query")
    async def find(
        self,
        document_id: Optional[str] = None,
        document_type: Optional[str] = None,
    ) -> List[VectorRecord]:
        """
        Records matching the optional filters, in insertion order.

        :param document_id: restrict to one document
        :param document_type: restrict to metadata.documentType
        :returns: matching records
        """
        stmt = select(VectorChunk)
        if document_id is not None:
            stmt = stmt.where(VectorChunk.document_id == document_id)
        if document_type is not None:
            stmt = stmt.where(
                VectorChunk.metadata_["documentType"].as_string() == document_type
            )

        async with self._session_factory() as session:
            rows = await session.scalars(stmt.order_by(VectorChunk.id))
            return [_to_record(row) for row in rows]

    @_store_call("metadata update")
    async def update_metadata(self, chunk_id: str, metadata: Metadata) -> bool:
        """
        Replace the metadata of a record.

        The new mapping replaces the old one, `updatedAt` is stamped
        and the insert stamps (`createdAt`, `dimensions`) are kept.

        :param chunk_id: chunk identifier
        :param metadata: new metadata
        :returns: False if no record has this chunk id
        """
        async with self._session_factory() as session:
            async with session.begin():
                row = await session.scalar(
                    select(VectorChunk)
                    .where(VectorChunk.chunk_id == chunk_id)
                    .with_for_update()
                )
                if row is None:
                    return False

                previous = row.metadata_ or {}
                updated: Dict[str, Any] = dict(metadata)
                for key in SYSTEM_METADATA_KEYS:
                    if key in previous:
                        updated[key] = previous[key]
                updated["updatedAt"] = _utcnow()
                row.metadata_ = updated

        logger.debug(f"[VECTOR_DB] Updated metadata of chunk {chunk_id}")
        return True

    @_store_call("delete")
    async def delete_by_chunk_id(self, chunk_id: str) -> bool:
        """
        Delete one record.

        :param chunk_id: chunk identifier
        :returns: whether a record was removed
        """
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    delete(VectorChunk).where(VectorChunk.chunk_id == chunk_id)
                )
        return result.rowcount > 0

    @_store_call("document delete")
    async def delete_by_document_id(self, document_id: str) -> DocumentDeletion:
        """
        Delete every record of a document.

        The affected chunk ids are read in the same transaction as the delete.

        :param document_id: document identifier
        :returns: number of removed records and their chunk ids
        """
        async with self._session_factory() as session:
            async with session.begin():
                chunk_ids = list(
                    await session.scalars(
                        select(VectorChunk.chunk_id).where(
                            VectorChunk.document_id == document_id
                        )
                    )
                )
                result = await session.execute(
                    delete(VectorChunk).where(VectorChunk.document_id == document_id)
                )

        logger.debug(
            f"[VECTOR_DB] Deleted {result.rowcount} chunks of document {document_id}"
        )
        return DocumentDeletion(count=result.rowcount, chunk_ids=chunk_ids)

    @_store_call("count")
    async def count_all(self) -> int:
        """Number of stored records."""
        async with self._session_factory() as session:
            return await session.scalar(select(func.count()).select_from(VectorChunk))

    @_store_call("distinct")
    async def distinct_document_ids(self) -> Set[str]:
        """Document ids having at least one record."""
        async with self._session_factory() as session:
            rows = await session.scalars(select(VectorChunk.document_id).distinct())
            return set(rows)

    @_store_call("aggregate")
    async def count_by_metadata_field(self, field_path: str) -> Dict[Any, int]:
        """
        Count records per value of a metadata field.

        Records lacking the field are counted under None.

        :param field_path: dotted path into metadata, e.g. `documentType`
        :returns: mapping of value to record count
        """
        keys = tuple(field_path.split("."))
        field = VectorChunk.metadata_[keys[0] if len(keys) == 1 else keys]
        values = select(field.as_string().label("value")).subquery()

        async with self._session_factory() as session:
            result = await session.execute(
                select(values.c.value, func.count().label("count")).group_by(
                    values.c.value
                )
            )
            return {row.value: row.count for row in result}

    async def ping(self) -> bool:
        """
        Check that the engine answers.

        :returns: True if a trivial query succeeded
        """
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logger.warning(f"Record store ping failed: {e}")
            return False
