"""Tests for file storage."""
from pathlib import Path

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.stored_file import StoredFile
from models.user import User
from services.storage_service import get_storage_root, store_file


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(auth0_id="test-storage-user-123", email="storage@example.com")
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


def test__get_storage_root__uses_setting(storage_root: Path) -> None:
    assert get_storage_root() == storage_root


async def test__store_file__writes_bytes_and_records_row(
    db_session: AsyncSession,
    test_user: User,
    storage_root: Path,
) -> None:
    stored = await store_file(
        db_session, test_user.id, b"image-bytes", "cover.png", content_type="image/png",
    )

    assert stored.id is not None
    assert stored.owner_id == test_user.id
    assert stored.file_name == "cover.png"
    assert stored.content_type == "image/png"
    assert stored.size == len(b"image-bytes")
    assert stored.path.startswith(f"{test_user.id}/")
    assert stored.path.endswith("-cover.png")
    assert (storage_root / stored.path).read_bytes() == b"image-bytes"


async def test__store_file__same_name_does_not_collide(
    db_session: AsyncSession,
    test_user: User,
    storage_root: Path,
) -> None:
    first = await store_file(db_session, test_user.id, b"one", "icon.ico")
    second = await store_file(db_session, test_user.id, b"two", "icon.ico")

    assert first.path != second.path
    assert (storage_root / first.path).read_bytes() == b"one"
    assert (storage_root / second.path).read_bytes() == b"two"


async def test__store_file__explicit_root(
    db_session: AsyncSession,
    test_user: User,
    tmp_path: Path,
) -> None:
    root = tmp_path / "elsewhere"

    stored = await store_file(db_session, test_user.id, b"data", "a.png", root=root)

    assert (root / stored.path).read_bytes() == b"data"


async def test__store_file__row_is_queryable(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    stored = await store_file(db_session, test_user.id, b"x", "x.png")

    result = await db_session.execute(select(StoredFile).where(StoredFile.id == stored.id))
    assert result.scalar_one().file_name == "x.png"
