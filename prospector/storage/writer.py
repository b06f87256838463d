from __future__ import annotations

import logging
from typing import Any, Iterable

from ..prospects.models import ProspectCandidate, now_ms
from .base import ProspectStore
from .errors import BatchWriteError, StoreError

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 450


class ProspectWriter:
    """
    Writes prospects in size-bounded atomic groups.

    Each group is committed on its own. When group N fails the call raises
    ``BatchWriteError`` and groups 0..N-1 remain committed: partial success is
    reported through ``BatchWriteError.committed``, never hidden.
    """

    def __init__(self, store: ProspectStore, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.store = store
        self.batch_size = batch_size

    def _groups(self, items: list[Any]) -> Iterable[tuple[int, list[Any]]]:
        for index, start in enumerate(range(0, len(items), self.batch_size)):
            yield index, items[start:start + self.batch_size]

    def append_batch(self, records: list[ProspectCandidate | dict[str, Any]]) -> list[str]:
        """Insert every record with a fresh id; returns the ids in input order."""
        documents = [
            r.to_document() if isinstance(r, ProspectCandidate) else dict(r)
            for r in records
        ]
        for doc in documents:
            created_at = doc.get("createdAt")
            if not isinstance(created_at, (int, float)) or isinstance(created_at, bool):
                doc["createdAt"] = now_ms()

        ids: list[str] = []
        for index, group in self._groups(documents):
            try:
                ids.extend(self.store.insert_many(group))
            except StoreError as exc:
                logger.error(
                    "Insert group %d failed after %d committed records (%s)",
                    index + 1, len(ids), exc.kind.value,
                )
                raise BatchWriteError(exc, "append", chunk_index=index, committed=len(ids)) from exc
            logger.info("Committed insert group %d (%d records)", index + 1, len(group))
        return ids

    def delete_batch(self, ids: list[str]) -> int:
        """
        Delete by id; blank ids are skipped and unknown ids are not an error.

        Returns how many ids were submitted in committed groups. The store does
        not say which ids matched a document, so unknown ids are counted too.
        """
        clean = [i.strip() for i in ids if i and i.strip()]
        processed = 0
        for index, group in self._groups(clean):
            try:
                self.store.delete_many(group)
            except StoreError as exc:
                logger.error(
                    "Delete group %d failed after %d committed deletions (%s)",
                    index + 1, processed, exc.kind.value,
                )
                raise BatchWriteError(exc, "delete", chunk_index=index, committed=processed) from exc
            processed += len(group)
            logger.info("Committed delete group %d (%d ids)", index + 1, len(group))
        return processed
