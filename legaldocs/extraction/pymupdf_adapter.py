import pymupdf

from legaldocs.extraction.base import BaseTextExtractor
from legaldocs.extraction.exceptions import TextExtractionError
from legaldocs.extraction.models import ExtractedText
from legaldocs.extraction.pdfplumber_adapter import PDF_TEXT_CONFIDENCE


class PyMuPdfAdapter(BaseTextExtractor):
    """Extracts the text layer of a PDF using PyMuPDF."""

    def __init__(self, max_pages: int = 100) -> None:
        self._max_pages = max_pages

    def extract(self, data: bytes) -> ExtractedText:
        try:
            with pymupdf.open(stream=data, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                page_count = doc.page_count
                if page_count > self._max_pages:
                    raise TextExtractionError(
                        f"PDF has {page_count} pages; at most {self._max_pages} are supported"
                    )
                pages = [page.get_text() for page in doc]
        except TextExtractionError:
            raise
        except Exception as exc:
            raise TextExtractionError(f"pymupdf extraction failed: {exc}") from exc
        return ExtractedText(
            text="\n".join(pages).strip(),
            confidence=PDF_TEXT_CONFIDENCE,
            page_count=page_count,
        )
