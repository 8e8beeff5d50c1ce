"""Splits extracted text into embedding-sized chunks.

Sentences are packed greedily up to ``max_chars``. A sentence longer than
the limit is packed word by word, and a single word longer than the limit
is cut into fixed-size pieces. Every chunk is an exact slice of the source
text, so ``text[chunk.start:chunk.end] == chunk.text``.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass

_SENTENCE_RE = re.compile(r"[^.!?]+(?:[.!?]+|$)")
_WORD_RE = re.compile(r"\S+")


@dataclass(frozen=True)
class TextChunk:
    index: int
    text: str
    start: int
    end: int


def split_into_chunks(text: str, max_chars: int = 1000) -> list[TextChunk]:
    if max_chars <= 0:
        raise ValueError("max_chars must be positive")

    spans = _pack(_units(text, max_chars), max_chars)
    return [
        TextChunk(index=index, text=text[start:end], start=start, end=end)
        for index, (start, end) in enumerate(spans)
    ]


def _units(text: str, max_chars: int) -> Iterator[tuple[int, int]]:
    """Yield (start, end) spans no longer than ``max_chars``, in text order."""
    for match in _SENTENCE_RE.finditer(text):
        start, end = _strip_span(text, match.start(), match.end())
        if start == end:
            continue
        if end - start <= max_chars:
            yield start, end
            continue
        for word in _WORD_RE.finditer(text, start, end):
            word_start, word_end = word.span()
            while word_end - word_start > max_chars:
                yield word_start, word_start + max_chars
                word_start += max_chars
            yield word_start, word_end


def _pack(units: Iterator[tuple[int, int]], max_chars: int) -> list[tuple[int, int]]:
    spans: list[tuple[int, int]] = []
    current: tuple[int, int] | None = None
    for start, end in units:
        if current is None:
            current = (start, end)
        elif end - current[0] <= max_chars:
            current = (current[0], end)
        else:
            spans.append(current)
            current = (start, end)
    if current is not None:
        spans.append(current)
    return spans


def _strip_span(text: str, start: int, end: int) -> tuple[int, int]:
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end
