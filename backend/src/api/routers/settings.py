"""User settings endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_request_user
from api.helpers import unauthorized
from models.user import User
from schemas.actions import ActionResponse
from schemas.user_settings import ThemeForm, UserSettingsResponse
from services import settings_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/", response_model=UserSettingsResponse)
async def get_settings(
    current_user: User | None = Depends(get_request_user),
    db: AsyncSession = Depends(get_async_session),
) -> UserSettingsResponse:
    """
    Get user settings.

    Creates empty settings if none exist.
    """
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    settings = await settings_service.get_or_create_settings(db, current_user.id)
    return UserSettingsResponse.model_validate(settings)


@router.post("/theme", response_model=ActionResponse)
async def change_theme(
    request: Request,
    current_user: User | None = Depends(get_request_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResponse:
    """
    Store the user's theme, keeping all other settings.

    Failures are reported as `{success: false}` without detail. The write runs
    inside a savepoint so a failure leaves the rest of the request session
    untouched.
    """
    if current_user is None:
        return unauthorized()

    user_id = current_user.id
    form = await request.form()
    try:
        async with db.begin_nested():
            data = ThemeForm.from_form(form)
            await settings_service.set_theme(db, user_id, data.theme)
    except Exception:
        logger.exception("Theme change failed for user %s", user_id)
        return ActionResponse(success=False)
    return ActionResponse(success=True)
