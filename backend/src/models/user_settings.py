"""UserSettings model for storing user preferences."""
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, JSONType, TimestampMixin

if TYPE_CHECKING:
    from models.user import User


class UserSettings(Base, TimestampMixin):
    """
    User settings - a JSON object keyed by setting name.

    Example:
        {"theme": "dark"}

    Updates merge keys into the existing object; keys not being written are kept.
    """

    __tablename__ = "user_settings"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    settings: Mapped[dict | None] = mapped_column(
        JSONType,
        nullable=True,
        comment="User preferences keyed by setting name (e.g. theme).",
    )

    user: Mapped["User"] = relationship("User", back_populates="settings")
