from __future__ import annotations

from collections import Counter
from typing import Any


def compute_import_stats(events: list[dict[str, Any]]) -> dict[str, Any]:
    imports = [e for e in events if e["type"] == "import"]
    total = len(imports)

    outcomes = Counter(e.get("status", "unknown") for e in imports)

    times = [e["duration_ms"] for e in imports if "duration_ms" in e]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Per-city totals
    per_city: dict[str, dict[str, int]] = {}
    for e in imports:
        city = e.get("city") or "unknown"
        bucket = per_city.setdefault(city, {"imports": 0, "imported": 0, "excluded": 0})
        bucket["imports"] += 1
        bucket["imported"] += e.get("imported", 0)
        bucket["excluded"] += e.get("excluded", 0)

    imported = sum(e.get("imported", 0) for e in imports)
    excluded = sum(e.get("excluded", 0) for e in imports)
    screened = imported + excluded

    return {
        "total_imports": total,
        "outcomes": dict(outcomes),
        "avg_duration_ms": avg_time,
        "prospects_imported": imported,
        "prospects_excluded": excluded,
        "exclusion_rate": round(excluded / screened * 100, 1) if screened else 0.0,
        "cities": [
            {"name": name, **counts}
            for name, counts in sorted(per_city.items(), key=lambda kv: -kv[1]["imported"])
        ],
    }
