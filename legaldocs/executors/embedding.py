from typing import ClassVar

from legaldocs.embeddings.base import EmbeddingProvider
from legaldocs.embeddings.chunking import split_into_chunks
from legaldocs.embeddings.exceptions import EmbeddingError
from legaldocs.executors.base import StageExecutor
from legaldocs.executors.exceptions import EmptyInputError, InputTooLargeError, ModelError
from legaldocs.executors.models import EmbeddingResult, ProgressReporter, no_progress


class EmbeddingExecutor(StageExecutor[str, EmbeddingResult]):
    """Chunks text and embeds the chunks in batches.

    Texts that need more than ``max_chunks`` chunks are rejected rather than
    silently truncated.
    """

    name: ClassVar[str] = "embedding"

    def __init__(
        self,
        provider: EmbeddingProvider,
        *,
        chunk_size: int = 1000,
        max_chunks: int = 200,
        batch_size: int = 16,
    ) -> None:
        self._provider = provider
        self._chunk_size = chunk_size
        self._max_chunks = max_chunks
        self._batch_size = max(1, batch_size)

    def run(self, input_: str, progress: ProgressReporter = no_progress) -> EmbeddingResult:
        chunks = split_into_chunks(input_, self._chunk_size)
        if not chunks:
            raise EmptyInputError("No text to embed")
        if len(chunks) > self._max_chunks:
            raise InputTooLargeError(
                f"Text splits into {len(chunks)} chunks; at most {self._max_chunks} are allowed"
            )

        vectors: list[list[float]] = []
        for offset in range(0, len(chunks), self._batch_size):
            batch = [chunk.text for chunk in chunks[offset : offset + self._batch_size]]
            try:
                embedded = self._provider.embed_batch(batch)
            except EmbeddingError as exc:
                raise ModelError(f"Embedding failed: {exc}") from exc
            self._check_vectors(embedded, len(batch))
            vectors.extend(embedded)
            progress(len(vectors) / len(chunks), f"Embedded {len(vectors)}/{len(chunks)} chunks")

        return EmbeddingResult(chunks=chunks, vectors=vectors)

    def _check_vectors(self, vectors: list[list[float]], expected: int) -> None:
        if len(vectors) != expected:
            raise ModelError(f"Embedding provider returned {len(vectors)} vectors for {expected} texts")
        for vector in vectors:
            if len(vector) != self._provider.dimension:
                raise ModelError(
                    f"Embedding has dimension {len(vector)}, expected {self._provider.dimension}"
                )
