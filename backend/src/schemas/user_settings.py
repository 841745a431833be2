"""Pydantic schemas for user settings endpoints."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.actions import FormModel


class ThemeForm(FormModel):
    """Form submitted by the theme switcher."""

    theme: str = Field(min_length=1, max_length=100)

    @field_validator("theme", mode="before")
    @classmethod
    def strip_theme(cls, v: Any) -> Any:
        """Theme names are trimmed."""
        return v.strip() if isinstance(v, str) else v


class UserSettingsResponse(BaseModel):
    """Stored settings for the current user."""

    model_config = ConfigDict(from_attributes=True)

    settings: dict[str, Any] = {}

    @field_validator("settings", mode="before")
    @classmethod
    def default_empty(cls, v: Any) -> Any:
        """Users without stored settings get an empty object."""
        return v if v is not None else {}
