"""Bookmark form actions."""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_request_user
from api.helpers import format_action_error, unauthorized
from models.bookmark import Bookmark
from models.user import User
from schemas.actions import ActionResponse, IdActionResponse, IdForm
from schemas.bookmark import (
    BookmarkActionResponse,
    BookmarkFlaggedForm,
    BookmarkForm,
    BookmarkImportanceForm,
    BookmarkReadForm,
    BookmarkResponse,
    BookmarkUpdateForm,
)
from services import bookmark_service, tag_service
from services.exceptions import BookmarkNotFoundError, CategoryNotFoundError, TagNotFoundError

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


async def _bookmark_result(db: AsyncSession, bookmark: Bookmark) -> BookmarkActionResponse:
    """Build the add/update result with the bookmark's linked tag ids."""
    response = BookmarkResponse.model_validate(bookmark)
    response.tag_ids = await tag_service.get_bookmark_tag_ids(db, bookmark.id)
    return BookmarkActionResponse(success=True, bookmark=response)


@router.post("/add", response_model=BookmarkActionResponse)
async def add_bookmark(
    request: Request,
    current_user: User | None = Depends(get_request_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResponse:
    """
    Create a bookmark from the add-bookmark form.

    Form parsing, tag resolution and the row insert run inside a savepoint:
    any failure there rolls back to it and is returned as
    `{success: false, error}`, leaving earlier work in the request session
    (such as a first-time user row) intact. Tag linking and image archival run
    afterwards and are not guarded; a failure there fails the request and the
    session rolls the bookmark back (image files already written to storage
    are left behind).
    """
    if current_user is None:
        return unauthorized()

    user_id = current_user.id
    form = await request.form()
    try:
        async with db.begin_nested():
            data = BookmarkForm.from_form(form)
            bookmark, tag_ids = await bookmark_service.create_bookmark(db, user_id, data)
    except Exception as e:
        return format_action_error(e, "add_bookmark")

    await bookmark_service.link_tags(db, bookmark, tag_ids)
    bookmark = await bookmark_service.archive_images(db, bookmark, user_id)
    return await _bookmark_result(db, bookmark)


@router.post("/update", response_model=BookmarkActionResponse)
async def update_bookmark(
    request: Request,
    current_user: User | None = Depends(get_request_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResponse:
    """
    Update a bookmark from the edit-bookmark form.

    Submitted tags are added to the bookmark's existing tags; tags left out of
    the form are not removed.
    """
    if current_user is None:
        return unauthorized()

    data = BookmarkUpdateForm.from_form(await request.form())
    try:
        bookmark, tag_ids = await bookmark_service.update_bookmark(db, current_user.id, data)
    except (BookmarkNotFoundError, CategoryNotFoundError, TagNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))

    await bookmark_service.link_tags(db, bookmark, tag_ids)
    bookmark = await bookmark_service.archive_images(db, bookmark, current_user.id)
    return await _bookmark_result(db, bookmark)


@router.post("/delete", response_model=IdActionResponse)
async def delete_bookmark(
    request: Request,
    current_user: User | None = Depends(get_request_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResponse:
    """Delete a bookmark by id."""
    if current_user is None:
        return unauthorized()

    data = IdForm.from_form(await request.form())
    await bookmark_service.delete_bookmark(db, data.id)
    return IdActionResponse(success=True, id=data.id)


@router.post("/flagged", response_model=ActionResponse)
async def update_flagged(
    request: Request,
    current_user: User | None = Depends(get_request_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResponse:
    """Set (`flagged=on`) or clear the flagged timestamp."""
    if current_user is None:
        return unauthorized()

    data = BookmarkFlaggedForm.from_form(await request.form())
    await bookmark_service.set_flagged(db, data.id, data.flagged)
    return ActionResponse(success=True)


@router.post("/importance", response_model=ActionResponse)
async def update_importance(
    request: Request,
    current_user: User | None = Depends(get_request_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResponse:
    """Set the importance level (defaults to 0)."""
    if current_user is None:
        return unauthorized()

    data = BookmarkImportanceForm.from_form(await request.form())
    await bookmark_service.set_importance(db, data.id, data.importance)
    return ActionResponse(success=True)


@router.post("/read", response_model=ActionResponse)
async def update_read(
    request: Request,
    current_user: User | None = Depends(get_request_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResponse:
    """Set (`read=on`) or clear the read timestamp."""
    if current_user is None:
        return unauthorized()

    data = BookmarkReadForm.from_form(await request.form())
    await bookmark_service.set_read(db, data.id, data.read)
    return ActionResponse(success=True)


@router.post("/opened", response_model=ActionResponse)
async def record_opened(
    request: Request,
    current_user: User | None = Depends(get_request_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResponse:
    """Record that the bookmark was opened (counter and last-opened time)."""
    if current_user is None:
        return unauthorized()

    data = IdForm.from_form(await request.form())
    try:
        await bookmark_service.record_opened(db, data.id)
    except BookmarkNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ActionResponse(success=True)
