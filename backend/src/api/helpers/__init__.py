"""API helper utilities."""
from api.helpers.action_results import (
    format_action_error,
    unauthorized,
)

__all__ = [
    "format_action_error",
    "unauthorized",
]
