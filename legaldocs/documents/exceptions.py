class DocumentError(Exception):
    """Base exception for document persistence errors."""


class DocumentNotFoundError(DocumentError):
    """Raised when a document cannot be found in the database."""


class DocumentStateError(DocumentError):
    """Raised when a write would violate the document's status transitions."""
