"""
Exceptions raised by the prospect store and the batch writer.
"""
from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    connectivity = "connectivity"
    permission = "permission"
    quota = "quota"
    not_found = "not_found"
    unknown = "unknown"


class StoreError(Exception):
    """Base exception for store failures."""

    def __init__(
        self,
        message: str,
        kind: FailureKind = FailureKind.unknown,
        operation: str | None = None,
        collection: str | None = None,
    ):
        self.message = message
        self.kind = kind
        self.operation = operation
        self.collection = collection
        super().__init__(message)

    @property
    def details(self) -> dict:
        return {
            "kind": self.kind.value,
            "operation": self.operation,
            "collection": self.collection,
        }


class DocumentNotFound(StoreError):
    def __init__(self, doc_id: str, collection: str | None = None):
        self.doc_id = doc_id
        super().__init__(
            f"Document {doc_id} not found",
            kind=FailureKind.not_found,
            operation="get",
            collection=collection,
        )


class BatchWriteError(StoreError):
    """A chunked write stopped part way; earlier chunks stay committed."""

    def __init__(self, cause: StoreError, operation: str, chunk_index: int, committed: int):
        self.cause = cause
        self.chunk_index = chunk_index
        self.committed = committed
        super().__init__(
            f"{operation} failed on chunk {chunk_index + 1} after {committed} "
            f"records were committed: {cause.message}",
            kind=cause.kind,
            operation=operation,
            collection=cause.collection,
        )

    @property
    def details(self) -> dict:
        return {
            **super().details,
            "chunk_index": self.chunk_index,
            "committed": self.committed,
        }
