"""SQLAlchemy models."""
from models.base import Base, TimestampMixin
from models.tag import Tag, bookmark_tags  # Must be before bookmark due to import
from models.bookmark import Bookmark
from models.category import Category
from models.stored_file import StoredFile
from models.user import User
from models.user_settings import UserSettings

__all__ = [
    "Base",
    "Bookmark",
    "Category",
    "StoredFile",
    "Tag",
    "TimestampMixin",
    "User",
    "UserSettings",
    "bookmark_tags",
]
