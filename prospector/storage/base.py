from __future__ import annotations

from typing import Any, Iterator, Protocol


class ProspectStore(Protocol):
    """
    Document store holding prospects.

    ``insert_many`` and ``delete_many`` are each one atomic write group: the
    whole call commits or nothing does. Callers are responsible for keeping a
    call under the backend's write-group ceiling.
    """

    collection: str

    def insert_many(self, documents: list[dict[str, Any]]) -> list[str]:
        """Insert documents and return their store-assigned ids, in order."""

    def delete_many(self, ids: list[str]) -> None:
        """Delete documents by id; unknown ids are ignored."""

    def get(self, doc_id: str) -> dict[str, Any] | None: ...

    def update(self, doc_id: str, fields: dict[str, Any]) -> None:
        """Merge ``fields`` into an existing document; raise ``DocumentNotFound`` otherwise."""

    def find_ids(self, field: str, value: Any) -> list[str]:
        """Ids of documents whose ``field`` equals ``value``."""

    def iter_documents(self) -> Iterator[tuple[str, dict[str, Any]]]: ...

    def close(self) -> None: ...
