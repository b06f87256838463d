from __future__ import annotations

import logging

from ..prospects.models import ProspectCandidate
from .fields import DELIMITER, resolve_columns
from .normalizer import normalize_row

logger = logging.getLogger(__name__)


def parse_prospect_csv(raw_text: str, city: str) -> list[ProspectCandidate]:
    """
    Parse an Overpass Turbo style export into candidates for ``city``.

    Steps:
    - Drop blank lines; the first remaining line is the header.
    - Resolve the source columns once from that header.
    - Normalize every data line independently, skipping rows without a name.

    A header without data rows is a valid input and yields an empty list.
    """
    lines = [line for line in raw_text.splitlines() if line.strip()]
    if len(lines) < 2:
        return []

    columns = resolve_columns(lines[0])
    candidates: list[ProspectCandidate] = []
    skipped = 0

    for line in lines[1:]:
        candidate = normalize_row(line.split(DELIMITER), columns, city)
        if candidate is None:
            skipped += 1
            continue
        candidates.append(candidate)

    logger.debug(
        "Parsed %d candidates for %s (%d rows skipped)", len(candidates), city, skipped,
    )
    return candidates
