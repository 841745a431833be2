"""Category model for hierarchical bookmark grouping."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.bookmark import Bookmark
    from models.user import User


class Category(Base, TimestampMixin):
    """
    Category model - a named, optionally nested grouping of bookmarks.

    The `initial` flag marks categories seeded for a new account; categories
    created through the API always have it unset.
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str | None] = mapped_column(String(255), nullable=True)
    color: Mapped[str | None] = mapped_column(String(50), nullable=True)
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )
    archived: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    public: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    initial: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    owner: Mapped["User"] = relationship(back_populates="categories")
    parent: Mapped["Category | None"] = relationship(remote_side=[id])
    bookmarks: Mapped[list["Bookmark"]] = relationship(back_populates="category")
