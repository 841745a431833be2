"""Object storage for binary files (archived bookmark images)."""
import logging
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from models.stored_file import StoredFile

logger = logging.getLogger(__name__)


def get_storage_root() -> Path:
    """Return the configured storage root directory."""
    return Path(get_settings().storage_path)


async def store_file(
    db: AsyncSession,
    owner_id: int,
    content: bytes,
    file_name: str,
    content_type: str | None = None,
    root: Path | None = None,
) -> StoredFile:
    """
    Write bytes to storage and record them as a StoredFile row.

    Files are laid out as `<root>/<owner_id>/<uuid>-<file_name>` so two uploads
    with the same name never collide.

    Args:
        db: Database session.
        owner_id: User that owns the file.
        content: Raw file bytes.
        file_name: Display file name (e.g. 'my-article.png').
        content_type: MIME type reported by the source, if any.
        root: Storage root; defaults to the STORAGE_PATH setting.

    Returns:
        The flushed StoredFile (id populated).
    """
    storage_root = root if root is not None else get_storage_root()
    relative_path = Path(str(owner_id)) / f"{uuid.uuid4().hex}-{file_name}"
    target = storage_root / relative_path

    await aiofiles.os.makedirs(target.parent, exist_ok=True)
    async with aiofiles.open(target, "wb") as f:
        await f.write(content)

    stored = StoredFile(
        owner_id=owner_id,
        file_name=file_name,
        content_type=content_type,
        size=len(content),
        path=relative_path.as_posix(),
    )
    db.add(stored)
    await db.flush()
    logger.info("Stored file %s (%d bytes) for user %s", stored.id, stored.size, owner_id)
    return stored
