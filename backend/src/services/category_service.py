"""Service layer for category form actions."""
import logging
from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.category import Category
from schemas.category import CategoryForm, CategoryUpdateForm
from services.exceptions import CategoryNotFoundError
from services.utils import create_slug

logger = logging.getLogger(__name__)


async def get_category(
    db: AsyncSession,
    category_id: int,
    owner_id: int | None = None,
) -> Category | None:
    """Get a category by id, optionally scoped to an owner."""
    query = select(Category).where(Category.id == category_id)
    if owner_id is not None:
        query = query.where(Category.owner_id == owner_id)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def ensure_category(db: AsyncSession, owner_id: int, category_id: int | None) -> None:
    """
    Check that a category reference points at one of the user's categories.

    A None reference is always valid.

    Raises:
        CategoryNotFoundError: If the category doesn't exist or belongs to someone else.
    """
    if category_id is None:
        return
    if await get_category(db, category_id, owner_id) is None:
        raise CategoryNotFoundError(category_id)


async def create_category(db: AsyncSession, owner_id: int, data: CategoryForm) -> Category:
    """
    Create a category for a user.

    The slug is derived from the name. Categories created here are never
    `initial`.

    Raises:
        CategoryNotFoundError: If the parent isn't one of the user's categories.
    """
    await ensure_category(db, owner_id, data.parent_id)
    category = Category(
        owner_id=owner_id,
        name=data.name,
        slug=create_slug(data.name),
        description=data.description,
        icon=data.icon,
        color=data.color,
        parent_id=data.parent_id,
        archived=data.archived,
        public=data.public,
        initial=False,
    )
    db.add(category)
    await db.flush()
    await db.refresh(category)
    logger.info("Created category %s for user %s", category.id, owner_id)
    return category


async def update_category(db: AsyncSession, owner_id: int, data: CategoryUpdateForm) -> Category:
    """
    Overwrite a category's fields by id.

    The row is not checked against the caller; owner and `initial` are left
    untouched.

    Raises:
        CategoryNotFoundError: If the category or its new parent doesn't exist.
        ValueError: If the category is made its own parent.
    """
    category = await get_category(db, data.id)
    if category is None:
        raise CategoryNotFoundError(data.id)
    if data.parent_id is not None and data.parent_id == data.id:
        raise ValueError("A category cannot be its own parent")
    await ensure_category(db, owner_id, data.parent_id)

    category.name = data.name
    category.slug = create_slug(data.name)
    category.description = data.description
    category.icon = data.icon
    category.color = data.color
    category.parent_id = data.parent_id
    category.archived = data.archived
    category.public = data.public
    category.updated_at = datetime.now(UTC)
    await db.flush()
    await db.refresh(category)
    return category


async def delete_category(db: AsyncSession, category_id: int) -> None:
    """
    Delete a category by id.

    Bookmarks and child categories that reference it are left in place; the
    foreign keys null their references. Missing ids are a no-op.
    """
    await db.execute(delete(Category).where(Category.id == category_id))
