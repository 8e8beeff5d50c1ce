"""Heuristic quality score for extracted text.

The engine's confidence is penalised when the text shows typical OCR
artefacts or is very short.
"""

import re

_SUSPICIOUS_PATTERNS = (
    re.compile(r"[0O]{3,}"),
    re.compile(r"[1Il]{3,}"),
    re.compile(r"\s{5,}"),
    re.compile(r"[^\w\s.,;:!?()-]{3,}"),
)
_ARTIFACT_PENALTY = 0.2
_SHORT_TEXT_PENALTY = 0.3
_SHORT_TEXT_CHARS = 50

_INLINE_WHITESPACE = re.compile(r"[ \t\f\v]+")
_BLANK_LINES = re.compile(r"\n\s*\n+")


def has_suspicious_patterns(text: str) -> bool:
    return any(pattern.search(text) for pattern in _SUSPICIOUS_PATTERNS)


def score_text_quality(raw_text: str, cleaned_text: str, confidence: float) -> float:
    score = confidence
    if has_suspicious_patterns(raw_text):
        score -= _ARTIFACT_PENALTY
    if len(cleaned_text) < _SHORT_TEXT_CHARS:
        score -= _SHORT_TEXT_PENALTY
    return max(0.0, min(1.0, score))


def clean_text(text: str) -> str:
    """Collapse runs of spaces and blank lines; keep paragraph breaks."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = [_INLINE_WHITESPACE.sub(" ", line).strip() for line in text.split("\n")]
    return _BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()
