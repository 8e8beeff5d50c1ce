class EmbeddingError(Exception):
    """Raised when the embedding provider fails or returns unusable vectors."""
