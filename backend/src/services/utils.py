"""Shared utility functions for service layer."""
import re
import unicodedata

DEFAULT_SLUG = "untitled"


def create_slug(value: str | None) -> str:
    """
    Build a URL-safe slug from free text.

    Accents are folded to ASCII, runs of other characters collapse to a single
    hyphen, and leading/trailing hyphens are dropped. Text with no usable
    characters yields 'untitled'.
    """
    if not value:
        return DEFAULT_SLUG
    ascii_value = (
        unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    )
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_value.lower()).strip("-")
    return slug or DEFAULT_SLUG
