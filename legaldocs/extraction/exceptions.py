class TextExtractionError(Exception):
    """Raised when an extraction adapter cannot produce text from the input."""
