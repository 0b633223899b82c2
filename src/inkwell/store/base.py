"""Document store contract used by the post and draft layers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

POSTS = "posts"
DRAFTS = "drafts"

Record = dict[str, Any]


class Predicate(BaseModel):
    """Simple record filter: field equality plus an optional text search.

    ``search`` matches case-insensitively as a substring of any field in
    ``search_fields``.
    """

    equals: dict[str, Any] = Field(default_factory=dict)
    search: str | None = None
    search_fields: list[str] = Field(default_factory=lambda: ["title", "content"])

    def matches(self, record: Record) -> bool:
        for field, expected in self.equals.items():
            if record.get(field) != expected:
                return False
        if self.search:
            needle = self.search.lower()
            return any(
                needle in str(record.get(field) or "").lower()
                for field in self.search_fields
            )
        return True


class OrderBy(BaseModel):
    """Sort key for ``select_many``."""

    field: str
    descending: bool = False


class DocumentStore(ABC):
    """A document store reachable by predicate queries and single-row CRUD.

    Every method raises ``StoreError`` when the backend fails.
    ``update`` and ``delete`` also raise it when no record has ``record_id``.
    """

    @abstractmethod
    def exists(self, collection: str, predicate: Predicate) -> bool:
        """Return True if any record in ``collection`` matches."""

    @abstractmethod
    def insert(self, collection: str, record: Record) -> Record:
        """Insert a record and return it with store-assigned fields."""

    @abstractmethod
    def update(self, collection: str, record_id: str, patch: Record) -> Record:
        """Apply ``patch`` to one record and return the updated record."""

    @abstractmethod
    def delete(self, collection: str, record_id: str) -> None:
        """Delete one record by id."""

    @abstractmethod
    def select_many(
        self,
        collection: str,
        predicate: Predicate | None = None,
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        """Return matching records, optionally ordered and limited."""
