from sqlalchemy.orm import DeclarativeBase

from vector_vault.db.meta import meta


class Base(DeclarativeBase):
    """Base for all models."""

    metadata = meta
