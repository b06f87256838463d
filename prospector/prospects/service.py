from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ..storage.base import ProspectStore
from ..storage.errors import DocumentNotFound
from ..storage.writer import ProspectWriter
from .models import Prospect, ProspectUpdate

logger = logging.getLogger(__name__)

# OSM exports sometimes carry the city in the address tag instead.
CITY_FIELDS = ("city", "addr:city")


def _city_of(data: dict[str, Any]) -> str | None:
    for field in CITY_FIELDS:
        value = data.get(field)
        if isinstance(value, str) and value.strip():
            return value
    return None


def _to_prospect(doc_id: str, data: dict[str, Any]) -> Prospect | None:
    """Build a prospect from a stored document, or ``None`` if it is unusable."""
    city = _city_of(data)
    if city is not None:
        data = {**data, "city": city}
    try:
        return Prospect.from_document(doc_id, data)
    except ValidationError as exc:
        logger.warning("Skipping malformed prospect %s: %d validation errors", doc_id, exc.error_count())
        return None


def list_prospects(store: ProspectStore, city: str | None = None) -> list[Prospect]:
    """All prospects, newest first, optionally restricted to one city."""
    prospects = [
        p for p in (_to_prospect(doc_id, data) for doc_id, data in store.iter_documents())
        if p is not None
    ]
    if city:
        prospects = [p for p in prospects if p.city.strip() == city.strip()]
    return sorted(prospects, key=lambda p: p.created_at, reverse=True)


def list_cities(store: ProspectStore) -> list[str]:
    cities: set[str] = set()
    for _, data in store.iter_documents():
        city = _city_of(data)
        if city is not None:
            cities.add(city.strip())
    return sorted(cities)


def update_prospect(store: ProspectStore, prospect_id: str, changes: ProspectUpdate) -> Prospect:
    fields = changes.model_dump(exclude_none=True, mode="json")
    if fields:
        store.update(prospect_id, fields)
    data = store.get(prospect_id)
    if data is None:
        raise DocumentNotFound(prospect_id, collection=store.collection)
    return Prospect.from_document(prospect_id, data)


def delete_prospect(store: ProspectStore, prospect_id: str) -> None:
    """Delete one prospect, failing loudly if the id matches nothing."""
    clean_id = prospect_id.strip()
    if not clean_id or store.get(clean_id) is None:
        raise DocumentNotFound(clean_id, collection=store.collection)
    store.delete_many([clean_id])
    logger.info("Deleted prospect %s", clean_id)


def delete_prospects_by_city(store: ProspectStore, city: str, batch_size: int = 450) -> int:
    """
    Delete every prospect of ``city``.

    Looks up ``city`` first and only falls back to ``addr:city`` when the
    primary field matches nothing. Returns the number of deleted prospects.
    """
    ids: list[str] = []
    for field in CITY_FIELDS:
        ids = store.find_ids(field, city)
        if ids:
            break
        logger.warning("No prospect found for %r via %r", city, field)

    if not ids:
        return 0
    return ProspectWriter(store, batch_size=batch_size).delete_batch(ids)
