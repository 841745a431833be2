"""Category form actions."""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_request_user
from api.helpers import unauthorized
from models.user import User
from schemas.actions import ActionResponse, IdActionResponse, IdForm
from schemas.category import CategoryForm, CategoryUpdateForm
from services import category_service
from services.exceptions import CategoryNotFoundError

router = APIRouter(prefix="/categories", tags=["categories"])


@router.post("/add", response_model=IdActionResponse)
async def add_category(
    request: Request,
    current_user: User | None = Depends(get_request_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResponse:
    """Create a category and return its id."""
    if current_user is None:
        return unauthorized()

    data = CategoryForm.from_form(await request.form())
    try:
        category = await category_service.create_category(db, current_user.id, data)
    except CategoryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return IdActionResponse(success=True, id=category.id)


@router.post("/update", response_model=ActionResponse)
async def update_category(
    request: Request,
    current_user: User | None = Depends(get_request_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResponse:
    """Update a category by id."""
    if current_user is None:
        return unauthorized()

    data = CategoryUpdateForm.from_form(await request.form())
    try:
        await category_service.update_category(db, current_user.id, data)
    except CategoryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return ActionResponse(success=True)


@router.post("/delete", response_model=ActionResponse)
async def delete_category(
    request: Request,
    current_user: User | None = Depends(get_request_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResponse:
    """
    Delete a category by id.

    Bookmarks in the category are kept; their category reference is cleared.
    """
    if current_user is None:
        return unauthorized()

    data = IdForm.from_form(await request.form())
    await category_service.delete_category(db, data.id)
    return ActionResponse(success=True)
