"""JSON-backed document store for local use and tests.

Holds every collection in a single JSON file, loaded on init and saved
after every write operation.  With no path it lives purely in memory.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from inkwell.errors import StoreError
from inkwell.store.base import DRAFTS, DocumentStore, OrderBy, Predicate, Record

logger = logging.getLogger(__name__)


class _StoreData(BaseModel):
    """Internal wrapper for JSON serialization."""

    collections: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)


def _now() -> str:
    return datetime.now(tz=UTC).isoformat(timespec="microseconds")


class LocalDocumentStore(DocumentStore):
    """File- or memory-backed implementation of ``DocumentStore``.

    Assigns ``id`` (uuid4 hex) and ``created_at``/``updated_at`` on insert,
    mirroring what the hosted backend does with column defaults.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._data = self._load()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _StoreData:
        if self._path is None or not self._path.exists():
            return _StoreData()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return _StoreData.model_validate(raw)
        except (json.JSONDecodeError, ValueError) as exc:
            logger.warning("Corrupt local store at %s, starting fresh: %s", self._path, exc)
            return _StoreData()

    def _save(self) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(self._data.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Could not write {self._path}: {exc}") from exc

    def _rows(self, collection: str) -> list[Record]:
        return self._data.collections.setdefault(collection, [])

    def _find_index(self, collection: str, record_id: str) -> int:
        for i, row in enumerate(self._rows(collection)):
            if str(row.get("id")) == str(record_id):
                return i
        raise StoreError(f"No record {record_id!r} in {collection}")

    # ── DocumentStore ────────────────────────────────────────────

    def exists(self, collection: str, predicate: Predicate) -> bool:
        with self._lock:
            return any(predicate.matches(row) for row in self._rows(collection))

    def insert(self, collection: str, record: Record) -> Record:
        row = copy.deepcopy(record)
        row.setdefault("id", uuid.uuid4().hex)
        timestamp = _now()
        row.setdefault("created_at", timestamp)
        if collection != DRAFTS:
            row.setdefault("updated_at", timestamp)
        with self._lock:
            self._rows(collection).append(row)
            self._save()
            return copy.deepcopy(row)

    def update(self, collection: str, record_id: str, patch: Record) -> Record:
        with self._lock:
            index = self._find_index(collection, record_id)
            row = self._rows(collection)[index]
            row.update(copy.deepcopy(patch))
            self._save()
            return copy.deepcopy(row)

    def delete(self, collection: str, record_id: str) -> None:
        with self._lock:
            index = self._find_index(collection, record_id)
            del self._rows(collection)[index]
            self._save()

    def select_many(
        self,
        collection: str,
        predicate: Predicate | None = None,
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        with self._lock:
            rows = list(enumerate(self._rows(collection)))
            if predicate is not None:
                rows = [(i, row) for i, row in rows if predicate.matches(row)]
            if order_by is not None:
                # Insertion index breaks ties so equal timestamps keep arrival order.
                rows.sort(
                    key=lambda item: (_sort_value(item[1].get(order_by.field)), item[0]),
                    reverse=order_by.descending,
                )
            result = [copy.deepcopy(row) for _, row in rows]
        if limit is not None:
            result = result[:limit]
        return result


def _sort_value(value: Any) -> tuple[bool, Any]:
    return (value is not None, value if value is not None else "")
