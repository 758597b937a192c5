"""API for checking project state."""
from vector_vault.web.api.monitoring.views import router

__all__ = ["router"]
