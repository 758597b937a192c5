"""Database layer: SQLAlchemy metadata and models."""
