from legaldocs.extraction.base import BaseTextExtractor
from legaldocs.extraction.models import ExtractedText


class PlainTextAdapter(BaseTextExtractor):
    """Decodes text files as UTF-8; undecodable bytes become U+FFFD."""

    def extract(self, data: bytes) -> ExtractedText:
        text = data.decode("utf-8-sig", errors="replace")
        return ExtractedText(text=text.strip(), confidence=1.0, page_count=1)
