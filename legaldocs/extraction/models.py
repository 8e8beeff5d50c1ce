from dataclasses import dataclass


@dataclass(frozen=True)
class ExtractedText:
    """Raw extraction output. ``confidence`` is the engine's own estimate in [0, 1]."""

    text: str
    confidence: float
    page_count: int = 1
