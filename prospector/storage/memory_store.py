from __future__ import annotations

import copy
import threading
import uuid
from typing import Any, Iterator

from .errors import DocumentNotFound


class InMemoryProspectStore:
    """Process-local store used for development and tests."""

    def __init__(self, collection: str = "prospects"):
        self.collection = collection
        self._docs: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def insert_many(self, documents: list[dict[str, Any]]) -> list[str]:
        staged = {uuid.uuid4().hex: copy.deepcopy(doc) for doc in documents}
        with self._lock:
            self._docs.update(staged)
        return list(staged)

    def delete_many(self, ids: list[str]) -> None:
        with self._lock:
            for doc_id in ids:
                self._docs.pop(doc_id, None)

    def get(self, doc_id: str) -> dict[str, Any] | None:
        with self._lock:
            doc = self._docs.get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def update(self, doc_id: str, fields: dict[str, Any]) -> None:
        with self._lock:
            if doc_id not in self._docs:
                raise DocumentNotFound(doc_id, collection=self.collection)
            self._docs[doc_id].update(copy.deepcopy(fields))

    def find_ids(self, field: str, value: Any) -> list[str]:
        with self._lock:
            return [doc_id for doc_id, doc in self._docs.items() if doc.get(field) == value]

    def iter_documents(self) -> Iterator[tuple[str, dict[str, Any]]]:
        with self._lock:
            snapshot = list(self._docs.items())
        for doc_id, doc in snapshot:
            yield doc_id, copy.deepcopy(doc)

    def count(self) -> int:
        with self._lock:
            return len(self._docs)

    def clear(self) -> None:
        with self._lock:
            self._docs.clear()

    def close(self) -> None:
        pass
