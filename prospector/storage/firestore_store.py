"""
Google Cloud Firestore backend for prospects.

Every write group maps to one ``WriteBatch`` commit, so a call either lands
completely or not at all. Google API errors are translated into
``StoreError`` with a ``FailureKind`` the API layer can report on.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from google.api_core import exceptions as gexc
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.field_path import FieldPath

from .config import DEFAULT_STORE_CONFIG, StoreConfig
from .errors import DocumentNotFound, FailureKind, StoreError

logger = logging.getLogger(__name__)

_KIND_BY_ERROR: tuple[tuple[type[Exception], FailureKind], ...] = (
    (gexc.PermissionDenied, FailureKind.permission),
    (gexc.Unauthenticated, FailureKind.permission),
    (gexc.Forbidden, FailureKind.permission),
    (gexc.ResourceExhausted, FailureKind.quota),
    (gexc.TooManyRequests, FailureKind.quota),
    (gexc.ServiceUnavailable, FailureKind.connectivity),
    (gexc.DeadlineExceeded, FailureKind.connectivity),
    (gexc.RetryError, FailureKind.connectivity),
    (gexc.NotFound, FailureKind.not_found),
)


def failure_kind(exc: Exception) -> FailureKind:
    for error_type, kind in _KIND_BY_ERROR:
        if isinstance(exc, error_type):
            return kind
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return FailureKind.connectivity
    return FailureKind.unknown


class FirestoreProspectStore:
    def __init__(self, client: firestore.Client, collection: str = "prospects"):
        self.client = client
        self.collection = collection

    @classmethod
    def from_config(cls, config: StoreConfig = DEFAULT_STORE_CONFIG) -> FirestoreProspectStore:
        client = firestore.Client(project=config.project, database=config.database)
        logger.info("Firestore client ready (project=%s, collection=%s)", client.project, config.collection)
        return cls(client, collection=config.collection)

    @property
    def _collection(self):
        return self.client.collection(self.collection)

    @contextmanager
    def _translate(self, operation: str):
        try:
            yield
        except StoreError:
            raise
        except (gexc.GoogleAPIError, ConnectionError, TimeoutError) as exc:
            kind = failure_kind(exc)
            raise StoreError(
                f"Firestore {operation} failed: {exc}",
                kind=kind,
                operation=operation,
                collection=self.collection,
            ) from exc

    def insert_many(self, documents: list[dict[str, Any]]) -> list[str]:
        batch = self.client.batch()
        ids: list[str] = []
        for doc in documents:
            ref = self._collection.document()
            batch.set(ref, doc)
            ids.append(ref.id)
        with self._translate("insert"):
            batch.commit()
        return ids

    def delete_many(self, ids: list[str]) -> None:
        batch = self.client.batch()
        for doc_id in ids:
            batch.delete(self._collection.document(doc_id))
        with self._translate("delete"):
            batch.commit()

    def get(self, doc_id: str) -> dict[str, Any] | None:
        with self._translate("get"):
            snapshot = self._collection.document(doc_id).get()
        return snapshot.to_dict() if snapshot.exists else None

    def update(self, doc_id: str, fields: dict[str, Any]) -> None:
        try:
            with self._translate("update"):
                self._collection.document(doc_id).update(fields)
        except StoreError as exc:
            if exc.kind is FailureKind.not_found:
                raise DocumentNotFound(doc_id, collection=self.collection) from exc
            raise

    def find_ids(self, field: str, value: Any) -> list[str]:
        # Field names such as "addr:city" need a quoted field path.
        path = FieldPath(field).to_api_repr()
        query = self._collection.where(filter=FieldFilter(path, "==", value))
        with self._translate("query"):
            return [snapshot.id for snapshot in query.stream()]

    def iter_documents(self) -> Iterator[tuple[str, dict[str, Any]]]:
        with self._translate("query"):
            snapshots = list(self._collection.stream())
        for snapshot in snapshots:
            yield snapshot.id, snapshot.to_dict() or {}

    def close(self) -> None:
        self.client.close()
