from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class StoreConfig:
    """
    Where prospects are persisted.

    ``backend`` is ``"memory"`` for a process-local store or ``"firestore"``
    for Google Cloud Firestore (credentials come from the usual
    ``GOOGLE_APPLICATION_CREDENTIALS`` lookup).
    """

    backend: str = os.getenv("PROSPECTOR_STORE", "memory")
    project: str | None = os.getenv("FIRESTORE_PROJECT") or None
    database: str | None = os.getenv("FIRESTORE_DATABASE") or None
    collection: str = os.getenv("PROSPECTOR_COLLECTION", "prospects")
    # Firestore caps a write batch at 500 operations.
    batch_size: int = 450


DEFAULT_STORE_CONFIG = StoreConfig()
