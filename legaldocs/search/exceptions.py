class SearchError(Exception):
    """Raised when a search cannot be answered."""
