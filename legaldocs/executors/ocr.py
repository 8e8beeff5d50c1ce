import mimetypes
from typing import ClassVar

from legaldocs.extraction.base import BaseTextExtractor
from legaldocs.extraction.exceptions import TextExtractionError
from legaldocs.executors.base import StageExecutor
from legaldocs.executors.exceptions import ExtractionFailedError, UnsupportedFormatError
from legaldocs.executors.models import OcrInput, OcrResult, ProgressReporter, no_progress
from legaldocs.executors.quality import clean_text, score_text_quality

_TEXT_TYPES = frozenset({"text/plain", "text/markdown", "text/csv"})
_GENERIC_TYPES = frozenset({"", "application/octet-stream", "binary/octet-stream"})


class OcrExecutor(StageExecutor[OcrInput, OcrResult]):
    """Turns raw document bytes into cleaned text and a quality score.

    PDFs use their text layer, raster images go through OCR and plain text
    is decoded directly.
    """

    name: ClassVar[str] = "ocr"

    def __init__(
        self,
        pdf_extractor: BaseTextExtractor,
        image_extractor: BaseTextExtractor,
        text_extractor: BaseTextExtractor,
    ) -> None:
        self._pdf_extractor = pdf_extractor
        self._image_extractor = image_extractor
        self._text_extractor = text_extractor

    def run(self, input_: OcrInput, progress: ProgressReporter = no_progress) -> OcrResult:
        if not input_.data:
            raise ExtractionFailedError("Document is empty (0 bytes)")

        extractor = self._select_extractor(input_)
        progress(0.1, "Extracting text")
        try:
            extracted = extractor.extract(input_.data)
        except TextExtractionError as exc:
            raise ExtractionFailedError(str(exc)) from exc

        progress(0.8, "Scoring text quality")
        text = clean_text(extracted.text)
        if not text:
            raise ExtractionFailedError("No text could be extracted from the document")

        quality = score_text_quality(extracted.text, text, extracted.confidence)
        progress(1.0, f"Extracted {len(text)} characters")
        return OcrResult(
            text=text,
            quality_score=quality,
            page_count=extracted.page_count,
            confidence=extracted.confidence,
        )

    def _select_extractor(self, input_: OcrInput) -> BaseTextExtractor:
        content_type = _effective_content_type(input_)
        if content_type == "application/pdf":
            return self._pdf_extractor
        if content_type.startswith("image/"):
            return self._image_extractor
        if content_type in _TEXT_TYPES:
            return self._text_extractor
        raise UnsupportedFormatError(f"Unsupported content type '{content_type or 'unknown'}'")


def _effective_content_type(input_: OcrInput) -> str:
    """Declared type, or the filename's guessed type when the declared one is generic."""
    declared = input_.content_type.split(";", 1)[0].strip().lower()
    if declared not in _GENERIC_TYPES or not input_.filename:
        return declared
    guessed, _ = mimetypes.guess_type(input_.filename)
    return (guessed or declared).lower()
