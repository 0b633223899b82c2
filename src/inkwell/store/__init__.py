"""Document store factory and registry."""

from __future__ import annotations

from pathlib import Path

from inkwell.config import InkwellConfig, StoreBackend
from inkwell.store.base import DRAFTS, POSTS, DocumentStore, OrderBy, Predicate, Record

__all__ = [
    "DRAFTS",
    "POSTS",
    "DocumentStore",
    "OrderBy",
    "Predicate",
    "Record",
    "open_store",
]


def open_store(config: InkwellConfig) -> DocumentStore:
    """Create the document store selected by ``config.store.backend``.

    Raises:
        StoreError: If the hosted backend is selected but not configured.
        ValueError: If the backend is unknown.
    """
    backend = StoreBackend(config.store.backend)

    from inkwell.store.local import LocalDocumentStore
    from inkwell.store.rest import RestDocumentStore

    if backend is StoreBackend.LOCAL:
        return LocalDocumentStore(Path(config.store.path))
    if backend is StoreBackend.SUPABASE:
        return RestDocumentStore(config.supabase, timeout=config.store.timeout)

    raise ValueError(f"Unknown store backend: {backend!r}")
