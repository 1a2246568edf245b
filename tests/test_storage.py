"""Tests for document upload helpers and blob store backends."""

import json

import httpx
import pytest

from app.connectors.supabase.client import LIST_PAGE_SIZE, SupabaseStorageClient
from app.core.errors import StorageError, ValidationError
from app.storage.local import LocalBlobStore
from app.storage.uploads import create_blob_store, file_extension, storage_path, validate_upload

BASE_URL = "https://project.supabase.test"


class TestUploadHelpers:
    def test_file_extension(self):
        assert file_extension("Report.PDF") == ".pdf"
        assert file_extension("archive.tar.gz") == ".gz"
        assert file_extension("README") == ""

    def test_validate_accepts_allowed_type(self):
        validate_upload("q1.xlsx", 1024, allowed_types=[".xlsx", ".pdf"], max_size_mb=1)

    def test_validate_rejects_type(self):
        with pytest.raises(ValidationError, match="Invalid file type"):
            validate_upload("payload.exe", 10, allowed_types=[".pdf"])

    def test_validate_rejects_missing_extension(self):
        with pytest.raises(ValidationError):
            validate_upload("noext", 10, allowed_types=[".pdf"])

    def test_validate_rejects_oversized(self):
        with pytest.raises(ValidationError, match="maximum allowed size of 1MB"):
            validate_upload("big.pdf", 2 * 1024 * 1024, allowed_types=[".pdf"], max_size_mb=1)

    def test_storage_path_is_unique_and_keeps_extension(self):
        first = storage_path("Q1 Report.pdf", folder="cust-1/")
        second = storage_path("Q1 Report.pdf", folder="cust-1")

        assert first != second
        assert first.startswith("cust-1/")
        assert first.endswith(".pdf")
        assert " " not in first

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_blob_store("s3")


class TestLocalBlobStore:
    @pytest.mark.asyncio
    async def test_upload_list_delete(self, tmp_path):
        blobs = LocalBlobStore(str(tmp_path))

        url = await blobs.upload("documents", "cust-1/a.pdf", b"%PDF", "application/pdf")
        entries = await blobs.list("documents", "cust-1")

        assert url == "/files/documents/cust-1/a.pdf"
        assert [(e.name, e.path, e.size) for e in entries] == [("a.pdf", "cust-1/a.pdf", 4)]
        assert entries[0].content_type == "application/pdf"

        await blobs.delete("documents", "cust-1/a.pdf")
        assert await blobs.list("documents", "cust-1") == []

    @pytest.mark.asyncio
    async def test_does_not_overwrite(self, tmp_path):
        blobs = LocalBlobStore(str(tmp_path))
        await blobs.upload("documents", "a.pdf", b"one")

        with pytest.raises(StorageError):
            await blobs.upload("documents", "a.pdf", b"two")

    @pytest.mark.asyncio
    async def test_rejects_path_traversal(self, tmp_path):
        blobs = LocalBlobStore(str(tmp_path / "root"))

        with pytest.raises(ValidationError):
            await blobs.upload("documents", "../../etc/passwd", b"x")

    @pytest.mark.asyncio
    async def test_missing_folder_lists_empty(self, tmp_path):
        assert await LocalBlobStore(str(tmp_path)).list("documents", "nobody") == []


class TestSupabaseStorageClient:
    def _client(self, handler) -> SupabaseStorageClient:
        return SupabaseStorageClient(
            base_url=BASE_URL,
            service_key="service-key",
            transport=httpx.MockTransport(handler),
            retry_base_delay=0,
        )

    @pytest.mark.asyncio
    async def test_upload(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"Key": "documents/cust-1/a.pdf"})

        client = self._client(handler)
        url = await client.upload("documents", "cust-1/a.pdf", b"%PDF", "application/pdf")
        await client.close()

        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/storage/v1/object/documents/cust-1/a.pdf"
        assert request.headers["Authorization"] == "Bearer service-key"
        assert request.headers["x-upsert"] == "false"
        assert request.headers["Content-Type"] == "application/pdf"
        assert request.content == b"%PDF"
        assert url == f"{BASE_URL}/storage/v1/object/public/documents/cust-1/a.pdf"

    @pytest.mark.asyncio
    async def test_list_paginates_and_skips_folders(self):
        offsets = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            offsets.append(body["offset"])
            assert body["prefix"] == "cust-1"
            if body["offset"] == 0:
                items = [
                    {
                        "id": str(i),
                        "name": f"f{i:03d}.pdf",
                        "updated_at": "2024-03-01T00:00:00Z",
                        "metadata": {"size": 10, "mimetype": "application/pdf"},
                    }
                    for i in range(LIST_PAGE_SIZE)
                ]
            else:
                items = [{"id": None, "name": "nested", "metadata": None}]
            return httpx.Response(200, json=items)

        client = self._client(handler)
        entries = await client.list("documents", "cust-1/")
        await client.close()

        assert offsets == [0, LIST_PAGE_SIZE]
        assert len(entries) == LIST_PAGE_SIZE
        assert entries[0].path == "cust-1/f000.pdf"
        assert entries[0].size == 10

    @pytest.mark.asyncio
    async def test_delete_sends_prefixes(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "DELETE"
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=[])

        client = self._client(handler)
        await client.delete("documents", "cust-1/a.pdf")
        await client.close()

        assert bodies == [{"prefixes": ["cust-1/a.pdf"]}]

    @pytest.mark.asyncio
    async def test_retries_server_errors(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(503, json={"message": "unavailable"})
            return httpx.Response(200, json=[])

        client = self._client(handler)
        await client.delete("documents", "a.pdf")
        await client.close()

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(400, json={"message": "The resource already exists"})

        client = self._client(handler)
        with pytest.raises(StorageError) as exc:
            await client.upload("documents", "a.pdf", b"x")
        await client.close()

        assert len(calls) == 1
        assert exc.value.upstream_status == 400
        assert "already exists" in exc.value.message

    @pytest.mark.asyncio
    async def test_rate_limit_exhaustion(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429)

        client = self._client(handler)
        with pytest.raises(StorageError, match="Max retries"):
            await client.delete("documents", "a.pdf")
        await client.close()
