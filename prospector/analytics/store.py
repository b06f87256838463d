from __future__ import annotations

import threading
import time
from typing import Any

_events: list[dict[str, Any]] = []
_lock = threading.Lock()


def record_import(result: dict[str, Any], duration_ms: float) -> None:
    with _lock:
        _events.append({
            "type": "import",
            "timestamp": time.time(),
            "duration_ms": duration_ms,
            **result,
        })


def get_events() -> list[dict[str, Any]]:
    with _lock:
        return list(_events)


def clear_events() -> None:
    with _lock:
        _events.clear()
