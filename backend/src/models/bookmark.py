"""Bookmark model for storing user bookmarks."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin
from models.tag import bookmark_tags

if TYPE_CHECKING:
    from models.category import Category
    from models.stored_file import StoredFile
    from models.tag import Tag
    from models.user import User


class Bookmark(Base, TimestampMixin):
    """Bookmark model - stores URLs with scraped metadata, reading state and tags."""

    __tablename__ = "bookmarks"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    author: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Scraped page content
    content_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    content_published_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    # Source URLs as submitted, plus the archived copies in object storage
    main_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    main_image_id: Mapped[int | None] = mapped_column(
        ForeignKey("stored_files.id", ondelete="SET NULL"), nullable=True,
    )
    icon_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon_id: Mapped[int | None] = mapped_column(
        ForeignKey("stored_files.id", ondelete="SET NULL"), nullable=True,
    )

    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    importance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Toggles are stored as "set at" timestamps; NULL means off
    flagged: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    read: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    opened_times: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    opened_last: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    owner: Mapped["User"] = relationship(back_populates="bookmarks")
    category: Mapped["Category | None"] = relationship(back_populates="bookmarks")
    main_image: Mapped["StoredFile | None"] = relationship(foreign_keys=[main_image_id])
    icon: Mapped["StoredFile | None"] = relationship(foreign_keys=[icon_id])
    tag_objects: Mapped[list["Tag"]] = relationship(
        secondary=bookmark_tags,
        back_populates="bookmarks",
    )
