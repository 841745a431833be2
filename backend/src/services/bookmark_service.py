"""Service layer for bookmark form actions."""
import asyncio
import logging
from datetime import UTC, datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from models.tag import bookmark_tags
from schemas.bookmark import BookmarkForm, BookmarkUpdateForm
from services import category_service, image_archiver, tag_service
from services.exceptions import BookmarkNotFoundError

logger = logging.getLogger(__name__)

# Value written by the opened-count patch. The web client computed
# `opened_times ?? 0 + 1`; `0 + 1` binds first, so the stored count is
# reset to 1 on every open instead of being incremented.
OPENED_COUNT_AFTER_OPEN = 1

# Columns copied verbatim from the bookmark form
FORM_COLUMNS = (
    "url",
    "domain",
    "title",
    "description",
    "author",
    "content_text",
    "content_html",
    "content_type",
    "content_published_date",
    "main_image_url",
    "icon_url",
    "note",
    "importance",
    "flagged",
    "category_id",
)


def _form_values(data: BookmarkForm) -> dict:
    return {column: getattr(data, column) for column in FORM_COLUMNS}


async def get_bookmark(db: AsyncSession, bookmark_id: int) -> Bookmark | None:
    """Get a bookmark by id."""
    result = await db.execute(select(Bookmark).where(Bookmark.id == bookmark_id))
    return result.scalar_one_or_none()


async def create_bookmark(
    db: AsyncSession,
    owner_id: int,
    data: BookmarkForm,
) -> tuple[Bookmark, list[int]]:
    """
    Insert a bookmark row for a user.

    Resolves the submitted tags (creating missing ones) but does not link them;
    callers link tags and archive images as separate steps so a failure there
    leaves the bookmark row in place.

    Args:
        db: Database session.
        owner_id: User creating the bookmark.
        data: Parsed form data.

    Returns:
        Tuple of (created bookmark, resolved tag ids).

    Raises:
        CategoryNotFoundError: If the category isn't one of the user's categories.
        TagNotFoundError: If a tag id isn't one of the user's tags.
        ValueError: If a tag name has an invalid format.
    """
    tag_ids = await tag_service.resolve_tag_ids(db, owner_id, data.tags)
    await category_service.ensure_category(db, owner_id, data.category_id)

    bookmark = Bookmark(owner_id=owner_id, **_form_values(data))
    db.add(bookmark)
    await db.flush()
    await db.refresh(bookmark)
    logger.info("Created bookmark %s for user %s", bookmark.id, owner_id)
    return bookmark, tag_ids


async def update_bookmark(
    db: AsyncSession,
    owner_id: int,
    data: BookmarkUpdateForm,
) -> tuple[Bookmark, list[int]]:
    """
    Overwrite a bookmark's fields from the edit form.

    The bookmark is looked up by id only. Tags are resolved but not linked;
    see `link_tags`.

    Returns:
        Tuple of (updated bookmark, resolved tag ids).

    Raises:
        BookmarkNotFoundError: If no bookmark has the given id.
        CategoryNotFoundError: If the category isn't one of the user's categories.
    """
    bookmark = await get_bookmark(db, data.id)
    if bookmark is None:
        raise BookmarkNotFoundError(data.id)

    tag_ids = await tag_service.resolve_tag_ids(db, owner_id, data.tags)
    await category_service.ensure_category(db, owner_id, data.category_id)

    for column, value in _form_values(data).items():
        setattr(bookmark, column, value)
    bookmark.owner_id = owner_id
    await db.flush()
    await db.refresh(bookmark)
    return bookmark, tag_ids


async def link_tags(db: AsyncSession, bookmark: Bookmark, tag_ids: list[int]) -> list[int]:
    """
    Add tag links to a bookmark.

    Links are only ever added: tags missing from `tag_ids` stay linked.
    """
    return await tag_service.add_bookmark_tags(db, bookmark.id, tag_ids)


async def archive_images(db: AsyncSession, bookmark: Bookmark, owner_id: int) -> Bookmark:
    """
    Archive the bookmark's main image and icon into object storage.

    Both URLs are fetched concurrently. Absent URLs, non-image URLs and failed
    fetches are skipped. Only references that were produced are written, so an
    earlier archived image is kept when its URL is now missing.
    """
    main_image, icon = await asyncio.gather(
        image_archiver.fetch_image_if_valid(bookmark.main_image_url),
        image_archiver.fetch_image_if_valid(bookmark.icon_url),
    )
    if main_image is None and icon is None:
        return bookmark

    if main_image is not None:
        stored = await image_archiver.store_image(
            db, owner_id, bookmark.title, bookmark.main_image_url, main_image,
        )
        bookmark.main_image_id = stored.id
    if icon is not None:
        stored = await image_archiver.store_image(
            db, owner_id, bookmark.title, bookmark.icon_url, icon,
        )
        bookmark.icon_id = stored.id

    await db.flush()
    await db.refresh(bookmark)
    return bookmark


async def delete_bookmark(db: AsyncSession, bookmark_id: int) -> None:
    """Delete a bookmark and its tag links by id. Missing ids are a no-op."""
    await db.execute(delete(bookmark_tags).where(bookmark_tags.c.bookmark_id == bookmark_id))
    await db.execute(delete(Bookmark).where(Bookmark.id == bookmark_id))


async def set_flagged(db: AsyncSession, bookmark_id: int, flagged: datetime | None) -> None:
    """Set or clear the flagged timestamp."""
    await db.execute(update(Bookmark).where(Bookmark.id == bookmark_id).values(flagged=flagged))


async def set_importance(db: AsyncSession, bookmark_id: int, importance: int) -> None:
    """Set the importance level."""
    await db.execute(
        update(Bookmark).where(Bookmark.id == bookmark_id).values(importance=importance),
    )


async def set_read(db: AsyncSession, bookmark_id: int, read: datetime | None) -> None:
    """Set or clear the read timestamp."""
    await db.execute(update(Bookmark).where(Bookmark.id == bookmark_id).values(read=read))


async def record_opened(db: AsyncSession, bookmark_id: int) -> int:
    """
    Record that a bookmark was opened.

    Reads the current counter, then writes OPENED_COUNT_AFTER_OPEN and stamps
    opened_last.

    Returns:
        The counter value written.

    Raises:
        BookmarkNotFoundError: If no bookmark has the given id.
    """
    result = await db.execute(select(Bookmark.opened_times).where(Bookmark.id == bookmark_id))
    row = result.first()
    if row is None:
        raise BookmarkNotFoundError(bookmark_id)

    logger.debug(
        "Bookmark %s opened (stored count %s, writing %s)",
        bookmark_id, row.opened_times, OPENED_COUNT_AFTER_OPEN,
    )
    await db.execute(
        update(Bookmark)
        .where(Bookmark.id == bookmark_id)
        .values(opened_times=OPENED_COUNT_AFTER_OPEN, opened_last=datetime.now(UTC)),
    )
    return OPENED_COUNT_AFTER_OPEN
