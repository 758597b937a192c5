"""WEB API for vector_vault."""
