"""Post write, view, and listing operations over the document store."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from pydantic import ValidationError as PydanticValidationError

from inkwell.config import HANGUL_SYLLABLES
from inkwell.errors import PersistenceError, RetrievalError, StoreError, ValidationError
from inkwell.posts.models import Post, PostForm
from inkwell.posts.slugs import (
    DEFAULT_MAX_ATTEMPTS,
    extract_excerpt,
    normalize_slug,
    resolve_unique_slug,
)
from inkwell.store.base import POSTS, DocumentStore, OrderBy, Predicate, Record

logger = logging.getLogger(__name__)

NEWEST_FIRST = OrderBy(field="created_at", descending=True)


def validate_form(form: PostForm) -> None:
    """Raise ValidationError unless the form has both a title and content."""
    missing = [name for name in ("title", "content") if not getattr(form, name).strip()]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


def _to_post(record: Record) -> Post:
    try:
        return Post.model_validate(record)
    except PydanticValidationError as exc:
        raise RetrievalError(f"Malformed post record {record.get('id')!r}: {exc}") from exc


class PostService:
    """Create, edit, view, and list posts."""

    def __init__(
        self,
        store: DocumentStore,
        extra_letters: str = HANGUL_SYLLABLES,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self.store = store
        self.extra_letters = extra_letters
        self.max_attempts = max_attempts

    def _fields(self, form: PostForm, slug: str, publish: bool) -> Record:
        return {
            "slug": slug,
            "title": form.title,
            "content": form.content,
            "excerpt": extract_excerpt(form.content),
            "category": form.category or None,
            "tags": list(form.tags),
            "published": publish,
        }

    def _resolve_slug(self, title: str, publish: bool) -> str:
        return resolve_unique_slug(
            self.store,
            title,
            publish,
            extra_letters=self.extra_letters,
            max_attempts=self.max_attempts,
        )

    # ── Write operations ─────────────────────────────────────────

    def create(self, form: PostForm, publish: bool) -> Post:
        """Insert a new post with a unique slug.

        Raises:
            ValidationError: Title or content is blank.
            PersistenceError: The insert failed (including a duplicate slug
                produced by a concurrent submission).
        """
        validate_form(form)
        slug = self._resolve_slug(form.title, publish)
        try:
            record = self.store.insert(POSTS, self._fields(form, slug, publish))
        except StoreError as exc:
            raise PersistenceError(f"Could not save post {slug!r}: {exc}") from exc
        logger.info("Created post %s (published=%s)", slug, publish)
        return _to_post(record)

    def update(self, post_id: str, form: PostForm, publish: bool) -> Post:
        """Overwrite an existing post from an editing form.

        The slug is kept when the normalized title is unchanged; otherwise a
        new unique slug is resolved.
        """
        validate_form(form)
        current = self.get(post_id)
        if current is None:
            raise PersistenceError(f"No post with id {post_id!r}")

        if normalize_slug(form.title, self.extra_letters) == normalize_slug(
            current.title, self.extra_letters
        ):
            slug = current.slug
        else:
            slug = self._resolve_slug(form.title, publish)

        patch = self._fields(form, slug, publish)
        patch["updated_at"] = datetime.now(tz=UTC).isoformat()
        try:
            record = self.store.update(POSTS, post_id, patch)
        except StoreError as exc:
            raise PersistenceError(f"Could not update post {post_id!r}: {exc}") from exc
        logger.info("Updated post %s -> %s", post_id, slug)
        return _to_post(record)

    # ── Read operations ──────────────────────────────────────────

    def _first(self, predicate: Predicate) -> Post | None:
        try:
            rows = self.store.select_many(POSTS, predicate, limit=1)
        except StoreError as exc:
            raise RetrievalError(f"Could not load post: {exc}") from exc
        return _to_post(rows[0]) if rows else None

    def get(self, post_id: str) -> Post | None:
        """Return a post by id, published or not."""
        return self._first(Predicate(equals={"id": post_id}))

    def get_by_slug(self, slug: str, published_only: bool = True) -> Post | None:
        """Return the post for a slug, or None if there is none."""
        equals: dict[str, object] = {"slug": slug}
        if published_only:
            equals["published"] = True
        return self._first(Predicate(equals=equals))

    def list_posts(
        self,
        category: str | None = None,
        search: str | None = None,
        limit: int | None = None,
        published_only: bool = True,
    ) -> list[Post]:
        """Return posts newest first, optionally filtered by category and text."""
        equals: dict[str, object] = {}
        if published_only:
            equals["published"] = True
        if category:
            equals["category"] = category
        predicate = Predicate(equals=equals, search=search.strip() if search else None)
        try:
            rows = self.store.select_many(POSTS, predicate, NEWEST_FIRST, limit)
        except StoreError as exc:
            raise RetrievalError(f"Could not list posts: {exc}") from exc
        return [_to_post(row) for row in rows]

    def list_categories(self) -> list[str]:
        """Distinct non-empty categories of published posts, sorted."""
        try:
            rows = self.store.select_many(POSTS, Predicate(equals={"published": True}))
        except StoreError as exc:
            raise RetrievalError(f"Could not list categories: {exc}") from exc
        return sorted({row["category"] for row in rows if row.get("category")})
