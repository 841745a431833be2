"""Service layer for user settings operations."""
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.user_settings import UserSettings
from services.exceptions import InvalidSettingsError


async def get_settings(db: AsyncSession, user_id: int) -> UserSettings | None:
    """Get user settings, returns None if not exists."""
    query = select(UserSettings).where(UserSettings.user_id == user_id)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_or_create_settings(db: AsyncSession, user_id: int) -> UserSettings:
    """Get user settings, creating default if not exists."""
    settings = await get_settings(db, user_id)
    if settings is None:
        settings = UserSettings(user_id=user_id, settings={})
        db.add(settings)
        await db.flush()
        await db.refresh(settings)
    return settings


async def merge_settings(
    db: AsyncSession,
    user_id: int,
    values: dict[str, Any],
) -> UserSettings:
    """
    Shallow-merge keys into the user's settings object.

    Keys not present in `values` are preserved.

    Raises:
        InvalidSettingsError: If the stored settings are not a JSON object.
    """
    settings = await get_or_create_settings(db, user_id)
    current = settings.settings if settings.settings is not None else {}
    if not isinstance(current, dict):
        raise InvalidSettingsError(user_id)

    # Assign a new dict so the JSON column is marked dirty
    settings.settings = {**current, **values}
    await db.flush()
    await db.refresh(settings)
    return settings


async def set_theme(db: AsyncSession, user_id: int, theme: str) -> UserSettings:
    """Store the user's theme preference."""
    return await merge_settings(db, user_id, {"theme": theme})
