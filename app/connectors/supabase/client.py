"""ADBOARD — Supabase Storage Client.

Blob store backed by the Supabase Storage REST API.
Handles authentication, retry logic and rate limiting.
"""

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from app.config import settings
from app.core.errors import StorageError
from app.models.api_models import DocumentEntry
from app.storage.base import BlobStore
from app.core.logging import get_logger

logger = get_logger("supabase.storage")

MAX_RETRIES = 3
RETRY_BASE_DELAY = 2  # seconds
LIST_PAGE_SIZE = 100


class SupabaseStorageClient(BlobStore):
    """Async HTTP client for Supabase Storage."""

    def __init__(
        self,
        base_url: str | None = None,
        service_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_base_delay: float = RETRY_BASE_DELAY,
    ):
        self.base_url = (base_url or settings.supabase_url or "").rstrip("/")
        self.service_key = service_key or settings.supabase_service_key or ""
        self.retry_base_delay = retry_base_delay
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def storage_url(self) -> str:
        return f"{self.base_url}/storage/v1"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=30.0,
                transport=self._transport,
                headers={
                    "Authorization": f"Bearer {self.service_key}",
                    "apikey": self.service_key,
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    # ── Core Request Method ──

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        content: bytes | None = None,
        headers: Dict[str, str] | None = None,
    ) -> Any:
        """Make a request with retry + rate-limit handling."""
        client = await self._get_client()

        for attempt in range(1, MAX_RETRIES + 1):
            try:
                resp = await client.request(
                    method, url, json=json, content=content, headers=headers
                )

                # Rate limited
                if resp.status_code == 429:
                    wait = self.retry_base_delay * (2 ** (attempt - 1))
                    logger.warning(
                        f"Rate limited (429). Retrying in {wait}s (attempt {attempt}/{MAX_RETRIES})"
                    )
                    await asyncio.sleep(wait)
                    continue

                resp.raise_for_status()
                if resp.headers.get("content-type", "").startswith("application/json"):
                    return resp.json()
                return None

            except httpx.HTTPStatusError as e:
                body = (
                    e.response.json()
                    if e.response.headers.get("content-type", "").startswith(
                        "application/json"
                    )
                    else {}
                )
                error_msg = body.get("message") or body.get("error") or str(e)

                if attempt < MAX_RETRIES and e.response.status_code >= 500:
                    wait = self.retry_base_delay * (2 ** (attempt - 1))
                    logger.warning(
                        f"Server error {e.response.status_code}. Retrying in {wait}s"
                    )
                    await asyncio.sleep(wait)
                    continue

                raise StorageError(error_msg, e.response.status_code) from e

            except httpx.RequestError as e:
                if attempt < MAX_RETRIES:
                    wait = self.retry_base_delay * (2 ** (attempt - 1))
                    logger.warning(f"Request error: {e}. Retrying in {wait}s")
                    await asyncio.sleep(wait)
                    continue
                raise StorageError(
                    f"Connection failed after {MAX_RETRIES} retries: {e}"
                ) from e

        raise StorageError("Max retries exhausted", 429)

    # ── Objects ──

    async def upload(
        self, bucket: str, path: str, data: bytes, content_type: str = ""
    ) -> str:
        url = f"{self.storage_url}/object/{bucket}/{path}"
        await self._request(
            "POST",
            url,
            content=data,
            headers={
                "Content-Type": content_type or "application/octet-stream",
                "cache-control": "3600",
                "x-upsert": "false",
            },
        )
        logger.info(f"Uploaded {len(data)} bytes to {bucket}/{path}")
        return self.public_url(bucket, path)

    async def list(self, bucket: str, folder: str = "") -> List[DocumentEntry]:
        """Fetch all pages of a folder listing."""
        url = f"{self.storage_url}/object/list/{bucket}"
        prefix = folder.strip("/")
        entries: List[DocumentEntry] = []
        offset = 0

        while True:
            page = await self._request(
                "POST",
                url,
                json={
                    "prefix": prefix,
                    "limit": LIST_PAGE_SIZE,
                    "offset": offset,
                    "sortBy": {"column": "name", "order": "asc"},
                },
            )
            page = page or []
            for item in page:
                # Folder placeholders carry no id
                if item.get("id") is None:
                    continue
                metadata = item.get("metadata") or {}
                path = f"{prefix}/{item['name']}" if prefix else item["name"]
                entries.append(
                    DocumentEntry(
                        name=item["name"],
                        path=path,
                        url=self.public_url(bucket, path),
                        size=int(metadata.get("size", 0) or 0),
                        content_type=metadata.get("mimetype", "") or "",
                        updated_at=item.get("updated_at"),
                    )
                )
            if len(page) < LIST_PAGE_SIZE:
                break
            offset += LIST_PAGE_SIZE

        logger.info(f"Listed {len(entries)} objects in {bucket}/{prefix}")
        return entries

    async def delete(self, bucket: str, path: str) -> None:
        url = f"{self.storage_url}/object/{bucket}"
        await self._request("DELETE", url, json={"prefixes": [path]})
        logger.info(f"Deleted {bucket}/{path}")

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.storage_url}/object/public/{bucket}/{path}"
