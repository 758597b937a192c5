"""Services package for vector_vault."""

from vector_vault.services import vector_db

__all__ = ["vector_db"]
