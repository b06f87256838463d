"""
Prospect persistence layer.

Responsibilities:
- Build the configured store client (Firestore or in-memory).
- Write and delete prospects in atomic groups of bounded size.
- Report store failures as connectivity, permission or quota problems.
"""
from __future__ import annotations

from .base import ProspectStore
from .config import DEFAULT_STORE_CONFIG, StoreConfig
from .memory_store import InMemoryProspectStore


def create_store(config: StoreConfig = DEFAULT_STORE_CONFIG) -> ProspectStore:
    if config.backend == "firestore":
        from .firestore_store import FirestoreProspectStore

        return FirestoreProspectStore.from_config(config)
    if config.backend == "memory":
        return InMemoryProspectStore(collection=config.collection)
    raise ValueError(f"Unknown store backend: {config.backend!r}")
