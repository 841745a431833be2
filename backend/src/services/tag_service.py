"""Service layer for tag operations."""
import logging
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.tag import Tag, bookmark_tags
from schemas.validators import validate_and_normalize_tags
from services.exceptions import TagNotFoundError

logger = logging.getLogger(__name__)


async def get_or_create_tags(
    db: AsyncSession,
    user_id: int,
    tag_names: list[str],
) -> list[Tag]:
    """
    Get existing tags or create new ones.

    Args:
        db: Database session.
        user_id: User ID to scope tags.
        tag_names: List of tag names to get or create.

    Returns:
        List of Tag objects (existing or newly created).
    """
    if not tag_names:
        return []

    normalized = validate_and_normalize_tags(tag_names)
    if not normalized:
        return []

    # Fetch existing tags
    result = await db.execute(
        select(Tag).where(
            Tag.user_id == user_id,
            Tag.name.in_(normalized),
        ),
    )
    existing_tags = {tag.name: tag for tag in result.scalars()}

    # Create missing tags
    tags = []
    for name in normalized:
        if name in existing_tags:
            tags.append(existing_tags[name])
        else:
            new_tag = Tag(user_id=user_id, name=name)
            db.add(new_tag)
            tags.append(new_tag)

    await db.flush()
    return tags


def split_tag_input(raw_tags: list[Any]) -> tuple[list[int], list[str]]:
    """
    Split raw tag items into existing tag ids and tag names.

    Items may be:
    - an integer: the id of an existing tag;
    - a string: a tag name (created if missing);
    - a select-widget object {"value": ..., "label": ..., "created": bool}:
      an integer value refers to an existing tag unless the item was just
      created in the widget, otherwise the label (or value) is a tag name.

    Returns:
        Tuple of (tag ids, tag names), each in first-seen order.
    """
    tag_ids: list[int] = []
    names: list[str] = []
    for item in raw_tags:
        if isinstance(item, dict):
            value = item.get("value")
            if isinstance(value, int) and not isinstance(value, bool) and not item.get("created"):
                tag_ids.append(value)
                continue
            item = item.get("label") or value
        if isinstance(item, bool) or item is None:
            continue
        if isinstance(item, int):
            tag_ids.append(item)
        else:
            names.append(str(item))
    return tag_ids, names


async def resolve_tag_ids(
    db: AsyncSession,
    user_id: int,
    raw_tags: list[Any],
) -> list[int]:
    """
    Resolve raw tag input to a de-duplicated list of tag ids owned by the user.

    Tags given by name are created as needed.

    Raises:
        TagNotFoundError: If a tag id doesn't belong to the user.
        ValueError: If a tag name has an invalid format.
    """
    requested_ids, names = split_tag_input(raw_tags)

    resolved: list[int] = []
    if requested_ids:
        result = await db.execute(
            select(Tag.id).where(Tag.user_id == user_id, Tag.id.in_(requested_ids)),
        )
        owned = set(result.scalars())
        for tag_id in requested_ids:
            if tag_id not in owned:
                raise TagNotFoundError(tag_id)
            if tag_id not in resolved:
                resolved.append(tag_id)

    for tag in await get_or_create_tags(db, user_id, names):
        if tag.id not in resolved:
            resolved.append(tag.id)
    return resolved


async def add_bookmark_tags(
    db: AsyncSession,
    bookmark_id: int,
    tag_ids: list[int],
) -> list[int]:
    """
    Link tags to a bookmark without removing existing links.

    Tags already linked are skipped, so membership stays a set. All new join
    rows are written in a single multi-row INSERT.

    Returns:
        The tag ids that were newly linked.
    """
    if not tag_ids:
        return []

    result = await db.execute(
        select(bookmark_tags.c.tag_id).where(bookmark_tags.c.bookmark_id == bookmark_id),
    )
    linked = set(result.scalars())
    new_ids = [tag_id for tag_id in dict.fromkeys(tag_ids) if tag_id not in linked]
    if not new_ids:
        return []

    await db.execute(
        insert(bookmark_tags),
        [{"bookmark_id": bookmark_id, "tag_id": tag_id} for tag_id in new_ids],
    )
    logger.debug("Linked %d tag(s) to bookmark %s", len(new_ids), bookmark_id)
    return new_ids


async def get_bookmark_tag_ids(db: AsyncSession, bookmark_id: int) -> list[int]:
    """Return the ids of all tags linked to a bookmark."""
    result = await db.execute(
        select(bookmark_tags.c.tag_id)
        .where(bookmark_tags.c.bookmark_id == bookmark_id)
        .order_by(bookmark_tags.c.tag_id),
    )
    return list(result.scalars())
