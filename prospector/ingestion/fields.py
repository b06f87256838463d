from __future__ import annotations

from dataclasses import dataclass, field

DELIMITER = ";"

# Source column names per logical field, highest priority first.
FIELD_PRIORITIES: dict[str, tuple[str, ...]] = {
    "name": ("name",),
    "phone": ("phone", "mobile", "contact:phone"),
    "email": ("email", "contact:email"),
    "activity": ("shop", "amenity", "craft"),
    "lat": ("@lat", "::lat", "latitude", "lat"),
    "lon": ("@lon", "::lon", "longitude", "lon"),
}


def split_header(header_line: str) -> list[str]:
    return [h.strip().lower() for h in header_line.split(DELIMITER)]


def find_column(headers: list[str], field_name: str) -> int | None:
    """Position of the first header matching ``field_name``'s priority list, or ``None``."""
    for candidate in FIELD_PRIORITIES[field_name]:
        if candidate in headers:
            return headers.index(candidate)
    return None


@dataclass(frozen=True)
class ColumnMap:
    """Resolved column positions for one dataset.

    ``positions`` keeps every present source column of a field in priority
    order, so per-row fallbacks (``phone`` empty, ``mobile`` filled) can be
    walked by the normalizer.
    """

    positions: dict[str, tuple[int, ...]] = field(default_factory=dict)

    def first(self, field_name: str) -> int | None:
        found = self.positions.get(field_name, ())
        return found[0] if found else None

    def candidates(self, field_name: str) -> tuple[int, ...]:
        return self.positions.get(field_name, ())


def resolve_columns(header_line: str) -> ColumnMap:
    headers = split_header(header_line)
    positions: dict[str, tuple[int, ...]] = {}
    for field_name, names in FIELD_PRIORITIES.items():
        positions[field_name] = tuple(headers.index(n) for n in names if n in headers)
    return ColumnMap(positions=positions)
