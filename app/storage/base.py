"""ADBOARD — Abstract Blob Store."""

from abc import ABC, abstractmethod
from typing import List

from app.models.api_models import DocumentEntry


class BlobStore(ABC):
    """File storage for customer documents.

    Paths are bucket-relative, "/"-separated ("<customer_id>/<file>").
    """

    @abstractmethod
    async def upload(
        self, bucket: str, path: str, data: bytes, content_type: str = ""
    ) -> str:
        """Store `data` at `path` and return its public URL.

        Must not overwrite an existing object.
        """
        ...

    @abstractmethod
    async def list(self, bucket: str, folder: str = "") -> List[DocumentEntry]:
        """List objects directly under `folder`."""
        ...

    @abstractmethod
    async def delete(self, bucket: str, path: str) -> None:
        """Remove the object at `path`."""
        ...

    @abstractmethod
    def public_url(self, bucket: str, path: str) -> str:
        """URL a browser can fetch the object from."""
        ...

    async def close(self) -> None:
        """Release any held connections."""
        return None
