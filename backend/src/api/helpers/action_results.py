"""Result helpers shared by the form-action routers."""
import logging

from pydantic import ValidationError

from schemas.actions import ActionResponse
from services.exceptions import (
    BookmarkNotFoundError,
    CategoryNotFoundError,
    InvalidSettingsError,
    TagNotFoundError,
)

logger = logging.getLogger(__name__)

UNAUTHORIZED = "Unauthorized"
GENERIC_ERROR = "Something went wrong. Please try again."

# Exceptions whose message is safe to show to the user
USER_FACING_ERRORS = (
    BookmarkNotFoundError,
    CategoryNotFoundError,
    InvalidSettingsError,
    TagNotFoundError,
    ValueError,
)


def unauthorized() -> ActionResponse:
    """Result for actions invoked without an authenticated user."""
    return ActionResponse(success=False, error=UNAUTHORIZED)


def describe_error(exc: Exception) -> str:
    """
    Turn an exception into a message for the action result.

    Validation errors list each failing field; known service errors use their
    own message; anything else gets a generic message so internals don't leak.
    """
    if isinstance(exc, ValidationError):
        parts = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"]) or "form"
            parts.append(f"{field}: {error['msg']}")
        return "; ".join(parts)
    if isinstance(exc, USER_FACING_ERRORS):
        return str(exc)
    return GENERIC_ERROR


def format_action_error(exc: Exception, action: str) -> ActionResponse:
    """Log a failed action and convert the exception into a failure result."""
    logger.exception("Action %s failed", action, exc_info=exc)
    return ActionResponse(success=False, error=describe_error(exc))
