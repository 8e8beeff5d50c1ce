import re
from abc import ABC, abstractmethod
from pathlib import PurePath

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def blob_key(owner_id: str, document_id: str, filename: str) -> str:
    """Build the storage key ``{owner_id}/{document_id}/{safe_filename}``."""
    name = _UNSAFE_CHARS.sub("_", PurePath(filename).name).strip("._") or "upload"
    return f"{owner_id}/{document_id}/{name}"


class BaseBlobStore(ABC):
    """Contract for durable, write-once file storage."""

    @abstractmethod
    def put(
        self,
        owner_id: str,
        document_id: str,
        filename: str,
        data: bytes,
        content_type: str,
    ) -> str:
        """Store ``data`` and return its locator.

        Must not return before the write is durable.

        Raises:
            StorageError: if the write fails.
        """

    @abstractmethod
    def get(self, locator: str) -> bytes:
        """Read a stored blob.

        Raises:
            BlobNotFoundError: if nothing is stored at ``locator``.
            StorageError: for any other backend failure.
        """

    @abstractmethod
    def delete(self, locator: str) -> None:
        """Remove a stored blob. Deleting a missing blob is a no-op."""
