"""API package for vector_vault."""

from vector_vault.web.api import monitoring, vectors

__all__ = ["monitoring", "vectors"]
