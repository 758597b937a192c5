"""Vector store API."""
from vector_vault.web.api.vectors.views import router

__all__ = ["router"]
