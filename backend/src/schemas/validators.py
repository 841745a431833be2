"""
Shared parsers and validators for submitted form fields.

Form posts carry every value as a string. The helpers here convert those
strings into the types the action schemas expect; they are used by the
bookmark, category and settings schemas alike.
"""
import json
import re
from datetime import UTC, datetime
from typing import Any

from services.exceptions import InvalidFormFieldError

# Tag format: lowercase alphanumeric with hyphens (e.g., 'machine-learning', 'web-dev')
TAG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

# Leading integer, as accepted by the web client's parseInt()
LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")

TOGGLE_ON = "on"


def empty_to_none(value: Any) -> Any:
    """Treat empty form strings as missing values."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def parse_int(field: str, value: Any, default: int | None = None) -> int:
    """
    Parse the leading integer of a form value ("12abc" -> 12).

    Args:
        field: Field name, used in error messages.
        value: Raw form value.
        default: Returned when the value is missing or empty. If None, a
            missing value is an error.

    Raises:
        InvalidFormFieldError: If no integer can be read from the value.
    """
    if isinstance(value, bool):
        raise InvalidFormFieldError(field, value, "expected an integer")
    if isinstance(value, int):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise InvalidFormFieldError(field, value, "value is required")
        return default
    match = LEADING_INT_PATTERN.match(str(value))
    if match is None:
        raise InvalidFormFieldError(field, value, "expected an integer")
    return int(match.group(1))


def parse_toggle(value: Any) -> datetime | None:
    """Checkbox toggle: "on" stamps the current time, anything else clears it."""
    if value == TOGGLE_ON:
        return datetime.now(UTC)
    return None


def parse_json(field: str, value: Any) -> Any:
    """
    Decode a JSON-encoded form value; missing values decode to None.

    Raises:
        InvalidFormFieldError: If the value is not valid JSON.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise InvalidFormFieldError(field, value, "malformed JSON") from e


def parse_reference(field: str, value: Any) -> int | None:
    """
    Resolve a reference to another row from a select-widget value.

    Accepts a JSON object with a `value` key, a bare id (number or numeric
    string), or a null-ish value ('null', '', 0, null), which yields None.

    Raises:
        InvalidFormFieldError: If the value is neither null-ish nor an id.
    """
    decoded = parse_json(field, value)
    if isinstance(decoded, dict):
        decoded = decoded.get("value")
    if not decoded or decoded == "null":
        return None
    return parse_int(field, decoded)


def parse_tag_input(value: Any) -> list[Any]:
    """
    Decode the tags field into a list of raw tag items.

    Raises:
        InvalidFormFieldError: If the decoded value is not a JSON array.
    """
    decoded = parse_json("tags", empty_to_none(value))
    if decoded is None:
        return []
    if not isinstance(decoded, list):
        raise InvalidFormFieldError("tags", value, "expected a JSON array")
    return decoded


def parse_datetime(field: str, value: Any) -> datetime | None:
    """
    Parse an ISO 8601 date or datetime; naive values are taken as UTC.

    Raises:
        InvalidFormFieldError: If the value is not ISO 8601.
    """
    value = empty_to_none(value)
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise InvalidFormFieldError(field, value, "expected an ISO 8601 date") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def validate_and_normalize_tag(tag: str) -> str:
    """
    Normalize and validate a single tag.

    Whitespace runs become hyphens, so 'Machine Learning' is stored as
    'machine-learning'.

    Args:
        tag: The tag string to validate.

    Returns:
        The normalized tag (lowercase, trimmed).

    Raises:
        ValueError: If tag is empty or has invalid format.
    """
    normalized = re.sub(r"\s+", "-", tag.lower().strip())
    if not normalized:
        raise ValueError("Tag name cannot be empty")
    if not TAG_PATTERN.match(normalized):
        raise ValueError(
            f"Invalid tag format: '{normalized}'. "
            "Use lowercase letters, numbers, and hyphens only (e.g., 'machine-learning').",
        )
    return normalized


def validate_and_normalize_tags(tags: list[str]) -> list[str]:
    """
    Normalize and validate a list of tags.

    Empty strings are skipped and duplicates collapsed, keeping first-seen order.

    Raises:
        ValueError: If any tag has invalid format.
    """
    normalized: list[str] = []
    for tag in tags:
        if not tag.strip():
            continue
        name = validate_and_normalize_tag(tag)
        if name not in normalized:
            normalized.append(name)
    return normalized
