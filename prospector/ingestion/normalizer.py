from __future__ import annotations

import math

from ..prospects.models import ProspectCandidate, ProspectStatus, now_ms
from .fields import ColumnMap

# OpenStreetMap shop/amenity/craft values -> French business labels.
ACTIVITY_LABELS: dict[str, str] = {
    "bakery": "Boulangerie",
    "hairdresser": "Coiffeur",
    "butcher": "Boucherie",
    "restaurant": "Restaurant",
    "cafe": "Café",
    "fast_food": "Restauration rapide",
    "bar": "Bar",
    "clothes": "Vêtements",
    "supermarket": "Supermarché",
    "convenience": "Épicerie",
    "car_repair": "Garage",
    "florist": "Fleuriste",
    "pharmacy": "Pharmacie",
    "bank": "Banque",
    "beauty": "Institut de beauté",
    "real_estate": "Agence Immobilière",
    "optician": "Opticien",
    "jewelry": "Bijouterie",
    "shoes": "Chaussures",
    "e-cigarette": "Vapoteur",
}


def translate_activity(code: str) -> str:
    if not code:
        return ""
    return ACTIVITY_LABELS.get(code.lower(), code)


def _value_at(values: list[str], index: int | None) -> str:
    if index is None or index < 0 or index >= len(values):
        return ""
    return values[index].strip()


def _first_filled(values: list[str], indices: tuple[int, ...]) -> str:
    for index in indices:
        value = _value_at(values, index)
        if value:
            return value
    return ""


def _parse_coordinate(raw: str) -> float | None:
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def normalize_row(
    values: list[str],
    columns: ColumnMap,
    city: str,
    created_at: int | None = None,
) -> ProspectCandidate | None:
    """
    Build one candidate from an already split row.

    Returns ``None`` when the row has no name, which callers treat as a
    silent skip.
    """
    name = _value_at(values, columns.first("name"))
    if not name:
        return None

    lat = _parse_coordinate(_value_at(values, columns.first("lat")))
    lon = _parse_coordinate(_value_at(values, columns.first("lon")))
    if lat is None or lon is None:
        lat = lon = None

    return ProspectCandidate(
        name=name,
        phone=_first_filled(values, columns.candidates("phone")),
        email=_first_filled(values, columns.candidates("email")),
        activity=translate_activity(_first_filled(values, columns.candidates("activity"))),
        city=city,
        lat=lat,
        lon=lon,
        status=ProspectStatus.TO_CONTACT,
        notes="",
        created_at=created_at if created_at is not None else now_ms(),
    )
