"""Shared exceptions for service layer operations."""


class BookmarkNotFoundError(Exception):
    """Raised when a bookmark id does not match any row."""

    def __init__(self, bookmark_id: int) -> None:
        self.bookmark_id = bookmark_id
        super().__init__(f"Bookmark {bookmark_id} not found")


class CategoryNotFoundError(Exception):
    """Raised when a category id doesn't exist or doesn't belong to the user."""

    def __init__(self, category_id: int) -> None:
        self.category_id = category_id
        super().__init__(f"Category not found or not owned by user: {category_id}")


class TagNotFoundError(Exception):
    """Raised when a tag id doesn't exist or doesn't belong to the user."""

    def __init__(self, tag_id: int) -> None:
        self.tag_id = tag_id
        super().__init__(f"Tag not found or not owned by user: {tag_id}")


class InvalidFormFieldError(ValueError):
    """
    Raised when a submitted form field cannot be converted to its expected type.

    Subclasses ValueError so callers that treat validation failures generically
    (e.g. pydantic validators) keep working.
    """

    def __init__(self, field: str, value: object, reason: str = "invalid value") -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid '{field}' field: {reason} ({value!r})")


class InvalidSettingsError(Exception):
    """Raised when a stored settings blob is not a JSON object."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"Stored settings for user {user_id} are not a JSON object")
