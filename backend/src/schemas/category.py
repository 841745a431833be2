"""Pydantic schemas for category form actions."""
from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field, field_validator

from schemas.actions import FormModel, IdForm
from schemas.validators import empty_to_none, parse_reference, parse_toggle


class CategoryForm(FormModel):
    """Fields submitted by the add-category form."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str | None = None
    icon: str | None = None
    color: str | None = None
    parent_id: int | None = Field(default=None, alias="parent")
    archived: datetime | None = None
    public: datetime | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        """Names are trimmed and must not be blank."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("Category name cannot be empty")
        return v

    @field_validator("description", "icon", "color", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Empty form strings are stored as NULL."""
        return empty_to_none(v)

    @field_validator("parent_id", mode="before")
    @classmethod
    def parse_parent(cls, v: Any) -> int | None:
        """'null', falsy values and empty selections mean a top-level category."""
        return parse_reference("parent", v)

    @field_validator("archived", "public", mode="before")
    @classmethod
    def parse_toggles(cls, v: Any) -> datetime | None:
        """Checkbox toggles."""
        return parse_toggle(v)


class CategoryUpdateForm(CategoryForm, IdForm):
    """Fields submitted by the edit-category form."""
