"""Offline embedding provider for local development and tests."""

import hashlib
import re

import numpy as np

from legaldocs.embeddings.base import EmbeddingProvider

_WORD_RE = re.compile(r"\w+", re.UNICODE)


class ExampleEmbeddingProvider(EmbeddingProvider):
    """Deterministic hashed bag-of-words vectors, normalised to unit length.

    Texts sharing words get a positive cosine similarity; identical texts
    score 1.0. No network access.
    """

    def __init__(self, dimension: int = 1536) -> None:
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return "example-hashed-bow"

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [self._embed(text) for text in texts]

    def _embed(self, text: str) -> list[float]:
        vector = np.zeros(self._dimension, dtype=np.float64)
        for word in _WORD_RE.findall(text.lower()):
            digest = hashlib.blake2b(word.encode("utf-8"), digest_size=8).digest()
            bucket = int.from_bytes(digest, "big") % self._dimension
            vector[bucket] += 1.0
        norm = np.linalg.norm(vector)
        if norm == 0:
            # A zero vector has no cosine similarity; use a fixed unit vector.
            vector[0] = 1.0
            norm = 1.0
        return (vector / norm).tolist()
