"""Serialization contract between a PostForm and a draft's content blob.

A draft is corrupt exactly when ``decode_form`` rejects its content.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from inkwell.errors import CorruptDraftError
from inkwell.posts.models import PostForm


def encode_form(form: PostForm) -> str:
    return form.model_dump_json()


def decode_form(content: str) -> PostForm:
    """Parse a draft blob back into a PostForm.

    Raises:
        CorruptDraftError: The blob is not JSON or not a valid form.
    """
    try:
        return PostForm.model_validate_json(content)
    except PydanticValidationError as exc:
        raise CorruptDraftError(f"Draft content is not a valid form: {exc.error_count()} error(s)") from exc
