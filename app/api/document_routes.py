"""ADBOARD — Customer Document API Routes."""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from app.api.customer_routes import get_visible_customer
from app.auth.dependencies import get_current_user, require_role
from app.auth.permissions import STAFF
from app.config import settings
from app.database import get_store
from app.models.api_models import DocumentEntry
from app.models.domain_models import User
from app.storage.base import BlobStore
from app.storage.uploads import get_blob_store, storage_path, validate_upload
from app.store.base import RecordStore
from app.core.logging import get_logger

logger = get_logger("api.documents")

router = APIRouter(prefix="/customers/{customer_id}/documents", tags=["Documents"])

require_staff = require_role(STAFF)


@router.get("", response_model=List[DocumentEntry])
async def list_documents(
    customer_id: str,
    user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
    blobs: BlobStore = Depends(get_blob_store),
):
    get_visible_customer(store, user, customer_id)
    return await blobs.list(settings.storage_bucket, customer_id)


@router.post("", response_model=DocumentEntry, status_code=201)
async def upload_document(
    customer_id: str,
    file: UploadFile = File(...),
    user: User = Depends(require_staff),
    store: RecordStore = Depends(get_store),
    blobs: BlobStore = Depends(get_blob_store),
):
    """Attach a file to a customer. Stored under a generated, collision-free name."""
    store.get("customers", customer_id)
    data = await file.read()
    filename = file.filename or ""
    validate_upload(
        filename,
        len(data),
        allowed_types=settings.allowed_extensions,
        max_size_mb=settings.max_upload_mb,
    )

    path = storage_path(filename, folder=customer_id)
    content_type = file.content_type or ""
    url = await blobs.upload(settings.storage_bucket, path, data, content_type)
    logger.info(
        f"Uploaded '{filename}' ({len(data)} bytes)",
        extra={"entity_id": customer_id, "user_id": user.id},
    )
    return DocumentEntry(
        name=path.rsplit("/", 1)[-1],
        path=path,
        url=url,
        size=len(data),
        content_type=content_type,
    )


@router.delete("/{name}")
async def delete_document(
    customer_id: str,
    name: str,
    user: User = Depends(require_staff),
    store: RecordStore = Depends(get_store),
    blobs: BlobStore = Depends(get_blob_store),
):
    store.get("customers", customer_id)
    path = f"{customer_id}/{name}"
    await blobs.delete(settings.storage_bucket, path)
    logger.info(f"Deleted document '{name}'", extra={"entity_id": customer_id, "user_id": user.id})
    return {"success": True}
