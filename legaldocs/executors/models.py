from collections.abc import Callable
from dataclasses import dataclass, field

from legaldocs.embeddings.chunking import TextChunk

# Receives stage-local progress in [0, 1] and an optional message.
ProgressReporter = Callable[[float, str | None], None]


def no_progress(fraction: float, message: str | None = None) -> None:
    _ = fraction, message


@dataclass(frozen=True)
class OcrInput:
    data: bytes
    content_type: str
    filename: str = ""


@dataclass(frozen=True)
class OcrResult:
    text: str
    quality_score: float
    page_count: int
    confidence: float


@dataclass(frozen=True)
class AnalysisInput:
    text: str
    declared_type: str | None = None


@dataclass(frozen=True)
class EmbeddingResult:
    chunks: list[TextChunk] = field(default_factory=list)
    vectors: list[list[float]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.vectors)
