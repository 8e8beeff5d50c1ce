import io

import pdfplumber

from legaldocs.extraction.base import BaseTextExtractor
from legaldocs.extraction.exceptions import TextExtractionError
from legaldocs.extraction.models import ExtractedText

PDF_TEXT_CONFIDENCE = 0.95


class PdfPlumberAdapter(BaseTextExtractor):
    """Extracts the text layer of a PDF using pdfplumber."""

    def __init__(self, max_pages: int = 100) -> None:
        self._max_pages = max_pages

    def extract(self, data: bytes) -> ExtractedText:
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                page_count = len(pdf.pages)
                if page_count > self._max_pages:
                    raise TextExtractionError(
                        f"PDF has {page_count} pages; at most {self._max_pages} are supported"
                    )
                pages = [page.extract_text() or "" for page in pdf.pages]
        except TextExtractionError:
            raise
        except Exception as exc:
            raise TextExtractionError(f"pdfplumber extraction failed: {exc}") from exc
        return ExtractedText(
            text="\n".join(pages).strip(),
            confidence=PDF_TEXT_CONFIDENCE,
            page_count=page_count,
        )
