"""Pydantic schemas for bookmark form actions."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.actions import ActionResponse, FormModel, IdForm
from schemas.validators import (
    empty_to_none,
    parse_datetime,
    parse_int,
    parse_reference,
    parse_tag_input,
    parse_toggle,
)

OPTIONAL_TEXT_FIELDS = (
    "domain",
    "title",
    "description",
    "author",
    "content_text",
    "content_html",
    "content_type",
    "main_image_url",
    "icon_url",
    "note",
)


class BookmarkForm(FormModel):
    """
    Fields submitted by the add-bookmark form.

    `category` arrives as JSON (a select-widget object or a bare id) and is
    resolved to `category_id`; `tags` arrives as a JSON array of raw tag items
    that the tag service resolves to tag ids.
    """

    model_config = ConfigDict(populate_by_name=True)

    url: str
    domain: str | None = None
    title: str | None = None
    description: str | None = None
    author: str | None = None
    content_text: str | None = None
    content_html: str | None = None
    content_type: str | None = None
    content_published_date: datetime | None = None
    main_image_url: str | None = None
    icon_url: str | None = None
    note: str | None = None
    importance: int = 0
    flagged: datetime | None = None
    category_id: int | None = Field(default=None, alias="category")
    tags: list[Any] = []

    @field_validator(*OPTIONAL_TEXT_FIELDS, mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Empty form strings are stored as NULL."""
        return empty_to_none(v)

    @field_validator("url", mode="before")
    @classmethod
    def strip_url(cls, v: Any) -> Any:
        """Reject blank URLs."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("URL cannot be empty")
        return v

    @field_validator("importance", mode="before")
    @classmethod
    def parse_importance(cls, v: Any) -> int:
        """Importance defaults to 0 when omitted."""
        return parse_int("importance", v, default=0)

    @field_validator("flagged", mode="before")
    @classmethod
    def parse_flagged(cls, v: Any) -> datetime | None:
        """Checkbox toggle."""
        return parse_toggle(v)

    @field_validator("content_published_date", mode="before")
    @classmethod
    def parse_published_date(cls, v: Any) -> datetime | None:
        """ISO 8601 date, blank means unknown."""
        return parse_datetime("content_published_date", v)

    @field_validator("category_id", mode="before")
    @classmethod
    def parse_category(cls, v: Any) -> int | None:
        """Resolve the category select value to an id."""
        return parse_reference("category", v)

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v: Any) -> list[Any]:
        """Decode the JSON tag array."""
        return parse_tag_input(v)


class BookmarkUpdateForm(BookmarkForm, IdForm):
    """Fields submitted by the edit-bookmark form."""


class BookmarkFlaggedForm(IdForm):
    """Form toggling the flagged state."""

    flagged: datetime | None = None

    @field_validator("flagged", mode="before")
    @classmethod
    def parse_flagged(cls, v: Any) -> datetime | None:
        """Checkbox toggle."""
        return parse_toggle(v)


class BookmarkReadForm(IdForm):
    """Form toggling the read state."""

    read: datetime | None = None

    @field_validator("read", mode="before")
    @classmethod
    def parse_read(cls, v: Any) -> datetime | None:
        """Checkbox toggle."""
        return parse_toggle(v)


class BookmarkImportanceForm(IdForm):
    """Form setting the importance level."""

    importance: int = 0

    @field_validator("importance", mode="before")
    @classmethod
    def parse_importance(cls, v: Any) -> int:
        """Importance defaults to 0 when omitted."""
        return parse_int("importance", v, default=0)


class BookmarkResponse(BaseModel):
    """Bookmark row as returned to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    url: str
    domain: str | None
    title: str | None
    description: str | None
    author: str | None
    content_text: str | None
    content_html: str | None
    content_type: str | None
    content_published_date: datetime | None
    main_image_url: str | None
    main_image_id: int | None
    icon_url: str | None
    icon_id: int | None
    note: str | None
    importance: int
    flagged: datetime | None
    read: datetime | None
    opened_times: int
    opened_last: datetime | None
    category_id: int | None
    created_at: datetime
    updated_at: datetime
    tag_ids: list[int] = []


class BookmarkActionResponse(ActionResponse):
    """Result of the add/update bookmark actions."""

    bookmark: BookmarkResponse | None = None
