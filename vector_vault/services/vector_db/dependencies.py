"""Vector store dependencies module."""

from fastapi import Request

from vector_vault.services.vector_db.service import VectorSearchService


def get_vector_service(request: Request) -> VectorSearchService:
    """
    Get the vector search service for FastAPI dependency injection.

    The service is created on startup and kept in the application state.

    :param request: current request
    :returns: VectorSearchService instance
    """
    return request.app.state.vector_service
