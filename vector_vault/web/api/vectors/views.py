"""Vector store API views."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from vector_vault.services.vector_db.dependencies import get_vector_service
from vector_vault.services.vector_db.service import VectorSearchService
from vector_vault.services.vector_db.types import (
    ScoredVectorRecord,
    StoreStats,
    VectorRecord,
)
from vector_vault.web.api.vectors.schema import (
    BatchStoreRequest,
    DeleteResponse,
    MetadataUpdateRequest,
    SearchRequest,
    StoreVectorRequest,
)

router = APIRouter()


@router.post(
    "/vectors",
    response_model=VectorRecord,
    status_code=status.HTTP_201_CREATED,
)
async def store_vector(
    payload: StoreVectorRequest,
    service: VectorSearchService = Depends(get_vector_service),
) -> VectorRecord:
    """
    Store one vector record.

    :param payload: record to store
    :param service: vector search service
    :returns: stored record with its id
    """
    return await service.store(payload)


@router.post(
    "/vectors/batch",
    response_model=List[VectorRecord],
    status_code=status.HTTP_201_CREATED,
)
async def store_vectors(
    payload: BatchStoreRequest,
    service: VectorSearchService = Depends(get_vector_service),
) -> List[VectorRecord]:
    """
    Store many vector records; none is stored if one is invalid.

    :param payload: records to store
    :param service: vector search service
    :returns: stored records
    """
    return await service.store_batch(payload.records)


@router.post(
    "/vectors/search",
    response_model=List[ScoredVectorRecord],
    response_model_exclude_unset=True,
)
async def search_vectors(
    payload: SearchRequest,
    service: VectorSearchService = Depends(get_vector_service),
) -> List[ScoredVectorRecord]:
    """
    Rank stored records against a query embedding.

    :param payload: query vector and search options
    :param service: vector search service
    :returns: scored records, best first
    """
    return await service.search(payload.query_embedding, payload.options())


@router.get("/vectors/stats", response_model=StoreStats)
async def get_stats(
    service: VectorSearchService = Depends(get_vector_service),
) -> StoreStats:
    """Record, document and document type counts."""
    return await service.stats()


@router.get("/vectors/{chunk_id}", response_model=VectorRecord)
async def get_vector(
    chunk_id: str,
    service: VectorSearchService = Depends(get_vector_service),
) -> VectorRecord:
    """
    Get one vector record.

    :param chunk_id: chunk identifier
    :param service: vector search service
    :returns: the record
    :raises HTTPException: If the chunk does not exist
    """
    record = await service.fetch(chunk_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Chunk {chunk_id} not found",
        )
    return record


@router.patch("/vectors/{chunk_id}/metadata", status_code=status.HTTP_204_NO_CONTENT)
async def update_vector_metadata(
    chunk_id: str,
    payload: MetadataUpdateRequest,
    service: VectorSearchService = Depends(get_vector_service),
) -> None:
    """
    Replace the metadata of a vector record.

    :raises HTTPException: If the chunk does not exist
    """
    if not await service.update_metadata(chunk_id, payload.metadata):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Chunk {chunk_id} not found",
        )


@router.delete("/vectors/{chunk_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vector(
    chunk_id: str,
    service: VectorSearchService = Depends(get_vector_service),
) -> None:
    """
    Delete a vector record.

    :raises HTTPException: If the chunk does not exist
    """
    if not await service.delete(chunk_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Chunk {chunk_id} not found",
        )


@router.get("/documents/{document_id}/vectors", response_model=List[VectorRecord])
async def get_document_vectors(
    document_id: str,
    service: VectorSearchService = Depends(get_vector_service),
) -> List[VectorRecord]:
    """All records of a document ordered by chunk index."""
    return await service.fetch_by_document(document_id)


@router.delete("/documents/{document_id}/vectors", response_model=DeleteResponse)
async def delete_document_vectors(
    document_id: str,
    service: VectorSearchService = Depends(get_vector_service),
) -> DeleteResponse:
    """Delete every record of a document."""
    return DeleteResponse(deleted=await service.delete_by_document(document_id))
