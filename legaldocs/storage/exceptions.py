class StorageError(Exception):
    """Raised when the blob store cannot complete an operation."""


class BlobNotFoundError(StorageError):
    """Raised when a locator does not point at a stored blob."""
