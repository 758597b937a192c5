"""Shared types for vector database module."""

from typing import Any, Dict, List, NamedTuple, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_serializer,
)
from pydantic.alias_generators import to_camel

# Values a metadata entry may hold
MetadataValue = Union[
    StrictBool,
    StrictInt,
    StrictFloat,
    StrictStr,
    None,
    List[Any],
    Dict[str, Any],
]
Metadata = Dict[str, MetadataValue]


class CamelModel(BaseModel):
    """Model serialized with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VectorRecord(CamelModel):
    """Embedding of one document chunk with its metadata."""

    id: Optional[int] = None
    document_id: str
    chunk_id: str
    chunk_index: int = Field(..., ge=0)
    content: Optional[str] = None
    embedding: List[float]
    metadata: Metadata = Field(default_factory=dict)


class ScoredVectorRecord(VectorRecord):
    """Vector record ranked against a query embedding."""

    similarity: float


class SearchOptions(CamelModel):
    """
    Options of a similarity search.

    `threshold` falls back to the configured default when it is None.
    """

    limit: int = Field(default=10, ge=1)
    threshold: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    document_id: Optional[str] = None
    document_type: Optional[str] = None
    include_content: bool = True


class StoreStats(CamelModel):
    """Aggregate statistics of the record store."""

    total_records: int
    unique_document_count: int
    type_distribution: Dict[Optional[str], int]
    dimensions: int

    @field_serializer("type_distribution", when_used="json")
    def _serialize_type_distribution(
        self,
        distribution: Dict[Optional[str], int],
    ) -> Dict[str, int]:
        # Untyped records are reported under the JSON key "null"
        return {
            "null" if doc_type is None else doc_type: count
            for doc_type, count in distribution.items()
        }


class DocumentDeletion(NamedTuple):
    """Outcome of deleting every chunk of a document."""

    count: int
    chunk_ids: List[str]
