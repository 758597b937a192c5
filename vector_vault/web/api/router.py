from fastapi.routing import APIRouter

from vector_vault.web.api import monitoring, vectors

api_router = APIRouter()
api_router.include_router(monitoring.router)
api_router.include_router(vectors.router, tags=["vectors"])
