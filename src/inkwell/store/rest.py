"""Hosted document store — PostgREST (Supabase) API client.

Speaks the REST dialect the hosted backend exposes under ``/rest/v1``:
``eq.``/``ilike.`` filters in the query string, ``order=`` and ``limit=``,
and ``Prefer: return=representation`` so writes echo the affected rows.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from inkwell.config import SupabaseConfig
from inkwell.errors import StoreError
from inkwell.store.base import DocumentStore, OrderBy, Predicate, Record

logger = logging.getLogger(__name__)


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def predicate_params(predicate: Predicate | None) -> list[tuple[str, str]]:
    """Translate a Predicate into PostgREST query parameters."""
    if predicate is None:
        return []
    params: list[tuple[str, str]] = []
    for field, value in predicate.equals.items():
        op = "is" if value is None else "eq"
        params.append((field, f"{op}.{_encode_value(value)}"))
    if predicate.search:
        pattern = _quote(f"*{predicate.search}*")
        clauses = ",".join(f"{field}.ilike.{pattern}" for field in predicate.search_fields)
        params.append(("or", f"({clauses})"))
    return params


class RestDocumentStore(DocumentStore):
    """Client for a PostgREST endpoint.

    Authenticates with the project's API key via urllib.
    """

    def __init__(self, config: SupabaseConfig, timeout: float = 10.0) -> None:
        if not config.is_configured:
            raise StoreError("Supabase url and key must both be set")
        self.config = config
        self.base_url = config.url.rstrip("/")
        self.timeout = timeout

    def _request(
        self,
        method: str,
        collection: str,
        params: list[tuple[str, str]],
        data: Record | None = None,
    ) -> Any:
        """Make an authenticated request and return the decoded JSON body."""
        query = urllib.parse.urlencode(params, safe="*(),.:\"", quote_via=urllib.parse.quote)
        url = f"{self.base_url}/rest/v1/{collection}"
        if query:
            url = f"{url}?{query}"

        headers = {
            "apikey": self.config.key,
            "Authorization": f"Bearer {self.config.key}",
            "Content-Type": "application/json",
        }
        if method != "GET":
            headers["Prefer"] = "return=representation"

        body = json.dumps(data).encode("utf-8") if data is not None else None
        req = urllib.request.Request(url, data=body, method=method, headers=headers)

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            raise StoreError(f"{method} {collection} failed ({exc.code}): {detail}") from exc
        except (urllib.error.URLError, TimeoutError) as exc:
            raise StoreError(f"{method} {collection} failed: {exc}") from exc

        if not raw:
            return []
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StoreError(f"{method} {collection} returned invalid JSON") from exc

    def exists(self, collection: str, predicate: Predicate) -> bool:
        params = [("select", "id"), *predicate_params(predicate), ("limit", "1")]
        rows = self._request("GET", collection, params)
        return bool(rows)

    def insert(self, collection: str, record: Record) -> Record:
        rows = self._request("POST", collection, [], record)
        if not rows:
            raise StoreError(f"Insert into {collection} returned no row")
        return rows[0]

    def update(self, collection: str, record_id: str, patch: Record) -> Record:
        rows = self._request("PATCH", collection, [("id", f"eq.{record_id}")], patch)
        if not rows:
            raise StoreError(f"No record {record_id!r} in {collection}")
        return rows[0]

    def delete(self, collection: str, record_id: str) -> None:
        rows = self._request("DELETE", collection, [("id", f"eq.{record_id}")])
        if not rows:
            raise StoreError(f"No record {record_id!r} in {collection}")

    def select_many(
        self,
        collection: str,
        predicate: Predicate | None = None,
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        params = [("select", "*"), *predicate_params(predicate)]
        if order_by is not None:
            direction = "desc" if order_by.descending else "asc"
            params.append(("order", f"{order_by.field}.{direction}"))
        if limit is not None:
            params.append(("limit", str(limit)))
        rows = self._request("GET", collection, params)
        logger.debug("Fetched %d row(s) from %s", len(rows), collection)
        return rows
