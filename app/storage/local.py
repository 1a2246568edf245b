"""ADBOARD — Local Filesystem Blob Store (development / single-node)."""

import mimetypes
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from app.core.errors import StorageError, ValidationError
from app.models.api_models import DocumentEntry
from app.storage.base import BlobStore
from app.core.logging import get_logger

logger = get_logger("storage.local")


class LocalBlobStore(BlobStore):
    """Stores objects as files under `<root>/<bucket>/<path>`."""

    def __init__(self, root: str, url_prefix: str = "/files"):
        self.root = Path(root).resolve()
        self.url_prefix = url_prefix.rstrip("/")

    def _resolve(self, bucket: str, path: str) -> Path:
        target = (self.root / bucket / path).resolve()
        bucket_root = (self.root / bucket).resolve()
        if target != bucket_root and bucket_root not in target.parents:
            raise ValidationError(f"Path escapes bucket: {path}")
        return target

    async def upload(
        self, bucket: str, path: str, data: bytes, content_type: str = ""
    ) -> str:
        target = self._resolve(bucket, path)
        if target.exists():
            raise StorageError(f"Object already exists: {path}", upstream_status=409)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
        logger.info(f"Stored {len(data)} bytes at {bucket}/{path}")
        return self.public_url(bucket, path)

    async def list(self, bucket: str, folder: str = "") -> List[DocumentEntry]:
        directory = self._resolve(bucket, folder)
        if not directory.is_dir():
            return []

        entries: List[DocumentEntry] = []
        for f in sorted(directory.iterdir(), key=lambda p: p.name):
            if not f.is_file():
                continue
            rel = f"{folder.strip('/')}/{f.name}" if folder else f.name
            stat = f.stat()
            entries.append(
                DocumentEntry(
                    name=f.name,
                    path=rel,
                    url=self.public_url(bucket, rel),
                    size=stat.st_size,
                    content_type=mimetypes.guess_type(f.name)[0] or "",
                    updated_at=datetime.fromtimestamp(
                        stat.st_mtime, tz=timezone.utc
                    ).isoformat(),
                )
            )
        return entries

    async def delete(self, bucket: str, path: str) -> None:
        target = self._resolve(bucket, path)
        if not target.is_file():
            raise StorageError(f"Object not found: {path}", upstream_status=404)
        try:
            target.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e
        logger.info(f"Deleted {bucket}/{path}")

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.url_prefix}/{bucket}/{path}"
