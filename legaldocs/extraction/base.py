from abc import ABC, abstractmethod

from legaldocs.extraction.models import ExtractedText


class BaseTextExtractor(ABC):
    """Contract for all text extraction adapters."""

    @abstractmethod
    def extract(self, data: bytes) -> ExtractedText:
        """Extract plain text from raw file content.

        Args:
            data: Raw file content.

        Returns:
            The extracted text with a confidence estimate and page count.

        Raises:
            TextExtractionError: if extraction fails for any reason.
        """
