from fastapi import APIRouter, Depends
from pydantic import BaseModel

from vector_vault.services.vector_db.dependencies import get_vector_service
from vector_vault.services.vector_db.service import VectorSearchService

router = APIRouter()


class HealthResponse(BaseModel):
    """Reachability of the backing stores."""

    database: bool
    cache: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(
    service: VectorSearchService = Depends(get_vector_service),
) -> HealthResponse:
    """
    Checks the health of a project.

    The cache being down does not make the service unusable,
    both flags are reported as they are.
    """
    return HealthResponse(
        database=await service.record_store.ping(),
        cache=await service.cache.ping(),
    )
