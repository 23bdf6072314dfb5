"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- The form service and fetcher built by the component factory
- Size-checked upload reading
"""

import logging

from fastapi import HTTPException, UploadFile, status

from slideforms.core.config import Settings
from slideforms.core.factory import get_factory
from slideforms.engine.service import FormService
from slideforms.interfaces.fetcher import BaseFetcher

logger = logging.getLogger(__name__)


def get_form_service() -> FormService:
    """Dependency for the configured form service."""
    return get_factory().get_form_service()


def get_fetcher() -> BaseFetcher:
    """Dependency for the configured URL fetcher."""
    return get_factory().get_fetcher()


async def read_upload(
    file: UploadFile,
    settings: Settings,
    allowed_extensions: set[str] | None = None,
) -> bytes:
    """Read an uploaded file, enforcing extension and size limits.

    Raises:
        HTTPException: 415 on a wrong extension, 413 when too large, 400 when empty.
    """
    filename = file.filename or ""
    if allowed_extensions and not any(filename.lower().endswith(ext) for ext in allowed_extensions):
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Only {', '.join(sorted(allowed_extensions))} files are supported",
        )

    content = await file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        logger.warning(f"Upload too large: {filename}")
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Upload exceeds {settings.max_upload_bytes} bytes",
        )
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Uploaded file '{filename}' is empty",
        )
    return content
