"""Tests for service layer utilities."""
import pytest

from services.utils import create_slug


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Reading List", "reading-list"),
        ("  Hello,   World!  ", "hello-world"),
        ("Crème Brûlée", "creme-brulee"),
        ("already-a-slug", "already-a-slug"),
        ("C++ & Rust", "c-rust"),
        ("2024 Plans", "2024-plans"),
    ],
)
def test__create_slug__normalizes_text(value: str, expected: str) -> None:
    assert create_slug(value) == expected


@pytest.mark.parametrize("value", [None, "", "!!!", "日本語"])
def test__create_slug__falls_back_when_nothing_usable(value: str | None) -> None:
    assert create_slug(value) == "untitled"
