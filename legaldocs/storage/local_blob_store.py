import os
import tempfile
from pathlib import Path

from legaldocs.logging.logger import Log
from legaldocs.storage.base import BaseBlobStore, blob_key
from legaldocs.storage.exceptions import BlobNotFoundError, StorageError


class LocalBlobStore(BaseBlobStore):
    """Stores blobs on the local filesystem under ``root``.

    Writes go to a temporary file in the target directory, are fsynced and
    then renamed into place, so a returned locator always points at a
    complete file.
    """

    DEFAULT_ROOT = Path("/app/files")

    def __init__(self, root: Path | None = None) -> None:
        self._root = root if root is not None else self.DEFAULT_ROOT

    def put(
        self,
        owner_id: str,
        document_id: str,
        filename: str,
        data: bytes,
        content_type: str,
    ) -> str:
        key = blob_key(owner_id, document_id, filename)
        path = self._resolve(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".upload-")
            try:
                with os.fdopen(fd, "wb") as tmp:
                    tmp.write(data)
                    tmp.flush()
                    os.fsync(tmp.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Failed to write blob {key}: {exc}") from exc

        Log.debug(f"Stored {len(data)} bytes at {key} ({content_type})")
        return key

    def get(self, locator: str) -> bytes:
        path = self._resolve(locator)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise BlobNotFoundError(f"Blob not found: {locator}") from exc
        except OSError as exc:
            raise StorageError(f"Failed to read blob {locator}: {exc}") from exc

    def delete(self, locator: str) -> None:
        try:
            self._resolve(locator).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete blob {locator}: {exc}") from exc

    def _resolve(self, locator: str) -> Path:
        root = self._root.resolve()
        path = (root / locator).resolve()
        if not path.is_relative_to(root):
            raise StorageError(f"Locator escapes storage root: {locator}")
        return path
