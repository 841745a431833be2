"""Pydantic schemas shared by all form actions."""
from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, field_validator

from schemas.validators import parse_int


class ActionResponse(BaseModel):
    """Result object returned by every form action."""

    success: bool
    error: str | None = None


class IdActionResponse(ActionResponse):
    """Action result carrying the id of the affected row."""

    id: int | None = None


class FormModel(BaseModel):
    """Base for schemas parsed from submitted form data."""

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> Self:
        """
        Build the schema from a form mapping (e.g. starlette FormData).

        Repeated keys resolve to their last submitted value.
        """
        return cls.model_validate({key: form.get(key) for key in form.keys()})


class IdForm(FormModel):
    """Form identifying a single row by id."""

    id: int

    @field_validator("id", mode="before")
    @classmethod
    def parse_id(cls, v: Any) -> int:
        """Parse the leading integer of the id field."""
        return parse_int("id", v)
