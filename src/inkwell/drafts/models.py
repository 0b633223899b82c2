"""Draft record model."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator


class Draft(BaseModel):
    """A stored snapshot of the editing form.

    ``content`` is opaque here; only ``inkwell.drafts.codec`` reads it.
    """

    id: str
    content: str
    created_at: datetime
    post_id: str | None = None

    @field_validator("id", "post_id", mode="before")
    @classmethod
    def _id_as_str(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value
