"""Schema for vector store API."""

from typing import List

from pydantic import Field

from vector_vault.services.vector_db.types import (
    CamelModel,
    Metadata,
    SearchOptions,
    VectorRecord,
)


class StoreVectorRequest(VectorRecord):
    """Record to store; the id is assigned by the store."""


class BatchStoreRequest(CamelModel):
    """Records to store in one all-or-nothing call."""

    records: List[StoreVectorRequest] = Field(..., description="Records to store")


class MetadataUpdateRequest(CamelModel):
    """Replacement metadata of a record."""

    metadata: Metadata = Field(..., description="New metadata of the record")


class SearchRequest(SearchOptions):
    """Similarity query."""

    query_embedding: List[float] = Field(..., description="Query vector")

    def options(self) -> SearchOptions:
        """Search options without the query vector."""
        return SearchOptions(**self.model_dump(exclude={"query_embedding"}))


class DeleteResponse(CamelModel):
    """Number of removed records."""

    deleted: int = Field(..., description="Number of records removed")
