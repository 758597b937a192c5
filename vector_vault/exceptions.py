"""Errors raised by the vector store."""

from typing import Optional


class VectorVaultError(Exception):
    """Base class for vector store errors."""


class ValidationError(VectorVaultError):
    """A record or query embedding does not fit the configured dimensions."""

    def __init__(
        self,
        message: str,
        chunk_id: Optional[str] = None,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
    ):
        super().__init__(message)
        self.chunk_id = chunk_id
        self.expected = expected
        self.actual = actual


class DuplicateChunkError(VectorVaultError):
    """A record with the same chunk id is already stored."""

    def __init__(self, chunk_id: Optional[str] = None):
        if chunk_id:
            message = f"Chunk {chunk_id} already exists"
        else:
            message = "One or more chunks already exist"
        super().__init__(message)
        self.chunk_id = chunk_id


class StoreUnavailableError(VectorVaultError):
    """The persistent engine could not serve the call."""


class CacheError(VectorVaultError):
    """
    A cache operation failed.

    Never raised out of the cache layer, only reported.
    """

    def __init__(self, operation: str, key: str, cause: BaseException):
        super().__init__(f"Cache {operation} failed for key {key}: {cause}")
        self.operation = operation
        self.key = key
        self.cause = cause
