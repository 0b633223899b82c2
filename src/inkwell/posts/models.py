"""Post domain models — pure Pydantic v2 data types."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class PostForm(BaseModel):
    """The in-progress editing form.

    Owned by the caller and mutated in place by the editor, the draft
    autosaver, and ``DraftStore.restore_into``.
    """

    title: str = ""
    content: str = ""
    category: str | None = ""
    tags: list[str] = Field(default_factory=list)
    published: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.title.strip() and not self.content.strip()

    def add_tag(self, tag: str) -> bool:
        """Append a trimmed tag unless it is blank or already present."""
        tag = tag.strip()
        if not tag or tag in self.tags:
            return False
        self.tags.append(tag)
        return True

    def remove_tag(self, tag: str) -> None:
        self.tags = [t for t in self.tags if t != tag]


class Post(BaseModel):
    """A post as stored in the ``posts`` collection."""

    id: str
    slug: str
    title: str
    content: str
    excerpt: str | None = None
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    published: bool = False
    created_at: datetime
    updated_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: object) -> object:
        # The hosted backend uses integer keys, the local store hex strings.
        return str(value) if isinstance(value, int) else value

    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags(cls, value: object) -> object:
        return [] if value is None else value

    def to_form(self) -> PostForm:
        """Load this post into an editing form."""
        return PostForm(
            title=self.title,
            content=self.content,
            category=self.category or "",
            tags=list(self.tags),
            published=self.published,
        )
