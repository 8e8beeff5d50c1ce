import io

import pytesseract
from PIL import Image, ImageSequence, UnidentifiedImageError

from legaldocs.extraction.base import BaseTextExtractor
from legaldocs.extraction.exceptions import TextExtractionError
from legaldocs.extraction.models import ExtractedText


class TesseractAdapter(BaseTextExtractor):
    """OCR for raster images (PNG, JPEG, multi-page TIFF) using Tesseract.

    Confidence is the mean of Tesseract's per-word confidences, scaled to [0, 1].
    """

    def __init__(self, language: str = "eng", max_pages: int = 100) -> None:
        self._language = language
        self._max_pages = max_pages

    def extract(self, data: bytes) -> ExtractedText:
        try:
            with Image.open(io.BytesIO(data)) as image:
                frames = [frame.convert("RGB") for frame in ImageSequence.Iterator(image)]
        except (UnidentifiedImageError, OSError) as exc:
            raise TextExtractionError(f"Cannot decode image: {exc}") from exc

        if len(frames) > self._max_pages:
            raise TextExtractionError(
                f"Image has {len(frames)} pages; at most {self._max_pages} are supported"
            )

        texts: list[str] = []
        confidences: list[float] = []
        try:
            for frame in frames:
                result = pytesseract.image_to_data(
                    frame, lang=self._language, output_type=pytesseract.Output.DICT
                )
                words = [word for word in result["text"] if word.strip()]
                texts.append(" ".join(words))
                confidences.extend(
                    float(conf)
                    for conf, word in zip(result["conf"], result["text"])
                    if word.strip() and float(conf) >= 0
                )
        except pytesseract.TesseractError as exc:
            raise TextExtractionError(f"Tesseract failed: {exc}") from exc
        except pytesseract.TesseractNotFoundError as exc:
            raise TextExtractionError("Tesseract binary is not installed") from exc

        confidence = sum(confidences) / len(confidences) / 100 if confidences else 0.0
        return ExtractedText(
            text="\n".join(texts).strip(),
            confidence=confidence,
            page_count=len(frames),
        )
