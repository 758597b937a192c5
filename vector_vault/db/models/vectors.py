from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB

from vector_vault.db.base import Base

# JSONB on PostgreSQL, plain JSON (text) elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


class VectorChunk(Base):
    """One stored embedding of a document chunk."""

    __tablename__ = "vector_chunks"

    id = Column(Integer, primary_key=True)
    document_id = Column(String, nullable=False, index=True)
    chunk_id = Column(String, nullable=False, unique=True)
    chunk_index = Column(Integer, nullable=False)
    content = Column(Text, nullable=True)
    embedding = Column(JSONType, nullable=False)
    # `metadata` is reserved on declarative classes
    metadata_ = Column("metadata", JSONType, nullable=False, default=dict)

    __table_args__ = (
        Index("ix_vector_chunks_document_chunk", "document_id", "chunk_index"),
        CheckConstraint("chunk_index >= 0", name="ck_vector_chunks_chunk_index"),
    )
