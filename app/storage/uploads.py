"""ADBOARD — Document upload helpers and blob store selection."""

import uuid
from functools import lru_cache
from typing import Optional, Sequence

from app.config import settings
from app.core.errors import ValidationError
from app.storage.base import BlobStore
from app.core.logging import get_logger

logger = get_logger("storage.uploads")


def file_extension(filename: str) -> str:
    """Lower-cased extension including the dot, or "" when absent."""
    if "." not in filename:
        return ""
    return "." + filename.rsplit(".", 1)[-1].lower()


def validate_upload(
    filename: str,
    size: int,
    allowed_types: Optional[Sequence[str]] = None,
    max_size_mb: Optional[float] = None,
) -> None:
    """Check the file type against `allowed_types` and the size limit."""
    if allowed_types:
        ext = file_extension(filename)
        if not ext or ext not in allowed_types:
            raise ValidationError(
                f"Invalid file type. Allowed types: {', '.join(allowed_types)}"
            )
    if max_size_mb and size / (1024 * 1024) > max_size_mb:
        raise ValidationError(
            f"File size exceeds the maximum allowed size of {max_size_mb}MB"
        )


def storage_path(filename: str, folder: str = "") -> str:
    """Collision-free object path: `<folder>/<uuid4><ext>`."""
    name = f"{uuid.uuid4()}{file_extension(filename)}"
    folder = folder.strip("/")
    return f"{folder}/{name}" if folder else name


def create_blob_store(backend: Optional[str] = None) -> BlobStore:
    """Build the configured blob store backend."""
    backend = (backend or settings.storage_backend).lower()
    if backend == "supabase":
        from app.connectors.supabase.client import SupabaseStorageClient

        return SupabaseStorageClient()
    if backend == "local":
        from app.storage.local import LocalBlobStore

        return LocalBlobStore(settings.storage_dir)
    raise ValueError(f"Unknown storage backend: {backend}")


@lru_cache(maxsize=1)
def get_blob_store() -> BlobStore:
    """Dependency — process-wide blob store."""
    store = create_blob_store()
    logger.info(f"Blob store backend: {type(store).__name__}")
    return store
