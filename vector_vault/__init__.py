"""vector_vault package."""
