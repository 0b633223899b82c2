"""Draft persistence over the document store.

Every save inserts a new record; drafts are never updated in place, so the
collection grows until something outside this module prunes it.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from inkwell.drafts.codec import decode_form, encode_form
from inkwell.drafts.models import Draft
from inkwell.errors import (
    CorruptDraftError,
    PersistenceError,
    RetrievalError,
    StoreError,
    ValidationError,
)
from inkwell.posts.models import PostForm
from inkwell.store.base import DRAFTS, DocumentStore, OrderBy, Predicate

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 10

# Alias to avoid shadowing by DraftStore.list method
_list = list


class DraftStore:
    """Save, list, restore, and discard editing snapshots."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def save(self, form: PostForm, post_id: str | None = None) -> Draft:
        """Insert a snapshot of ``form``.

        Raises:
            ValidationError: Both title and content are blank.
            PersistenceError: The insert failed.
        """
        if form.is_empty:
            raise ValidationError("Nothing to save: title and content are both empty")

        record: dict[str, object] = {"content": encode_form(form)}
        if post_id is not None:
            record["post_id"] = post_id
        try:
            inserted = self.store.insert(DRAFTS, record)
        except StoreError as exc:
            raise PersistenceError(f"Could not save draft: {exc}") from exc

        draft = Draft.model_validate(inserted)
        logger.debug("Saved draft %s", draft.id)
        return draft

    def list(self, limit: int = DEFAULT_LIST_LIMIT) -> _list[Draft]:
        """Return up to ``limit`` readable drafts, newest first.

        Drafts whose content does not decode are left out of the result.

        Raises:
            RetrievalError: The fetch failed.
        """
        try:
            rows = self.store.select_many(
                DRAFTS,
                order_by=OrderBy(field="created_at", descending=True),
                limit=limit,
            )
        except StoreError as exc:
            raise RetrievalError(f"Could not load drafts: {exc}") from exc

        drafts: _list[Draft] = []
        for row in rows:
            try:
                draft = Draft.model_validate(row)
                decode_form(draft.content)
            except (PydanticValidationError, CorruptDraftError) as exc:
                logger.debug("Skipping unreadable draft %s: %s", row.get("id"), exc)
                continue
            drafts.append(draft)
        return drafts

    def get(self, draft_id: str) -> Draft | None:
        """Return a draft by id, or None if there is none.

        Raises:
            RetrievalError: The fetch failed or the record is malformed.
        """
        try:
            rows = self.store.select_many(DRAFTS, Predicate(equals={"id": draft_id}), limit=1)
        except StoreError as exc:
            raise RetrievalError(f"Could not load draft {draft_id!r}: {exc}") from exc
        if not rows:
            return None
        try:
            return Draft.model_validate(rows[0])
        except PydanticValidationError as exc:
            raise RetrievalError(f"Malformed draft record {draft_id!r}") from exc

    def restore(self, draft: Draft) -> PostForm:
        """Decode a draft into a fresh form.

        Raises:
            CorruptDraftError: The draft's content is malformed.
        """
        return decode_form(draft.content)

    def restore_into(self, draft: Draft, form: PostForm) -> PostForm:
        """Overwrite ``form`` in place with the draft's fields.

        ``form`` is only touched once the draft has decoded successfully.
        """
        restored = self.restore(draft)
        for field in PostForm.model_fields:
            setattr(form, field, getattr(restored, field))
        return form

    def discard(self, draft_id: str) -> None:
        """Delete a draft by id.

        Raises:
            PersistenceError: The delete failed or no such draft exists.
        """
        try:
            self.store.delete(DRAFTS, draft_id)
        except StoreError as exc:
            raise PersistenceError(f"Could not delete draft {draft_id!r}: {exc}") from exc
        logger.debug("Deleted draft %s", draft_id)
