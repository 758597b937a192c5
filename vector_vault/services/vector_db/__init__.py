"""Vector database services module."""

# Export types first to avoid circular imports
from vector_vault.services.vector_db.types import (
    ScoredVectorRecord,
    SearchOptions,
    StoreStats,
    VectorRecord,
)
from vector_vault.services.vector_db.similarity import (
    cosine_similarities,
    cosine_similarity,
)
from vector_vault.services.vector_db.record_store import RecordStore
from vector_vault.services.vector_db.cache import VectorCache
from vector_vault.services.vector_db.service import VectorSearchService
from vector_vault.services.vector_db.lifetime import (
    VectorStoreResources,
    init_vector_store,
    shutdown_vector_store,
    vector_store_lifespan,
)

__all__ = [
    "RecordStore",
    "ScoredVectorRecord",
    "SearchOptions",
    "StoreStats",
    "VectorCache",
    "VectorRecord",
    "VectorSearchService",
    "VectorStoreResources",
    "cosine_similarities",
    "cosine_similarity",
    "init_vector_store",
    "shutdown_vector_store",
    "vector_store_lifespan",
]
