import httpx
import openai

from legaldocs.embeddings.base import EmbeddingProvider
from legaldocs.embeddings.exceptions import EmbeddingError


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embeddings from the OpenAI embeddings API (text-embedding-3-* models)."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str = "text-embedding-3-small",
        dimension: int = 1536,
        timeout_seconds: int = 30,
    ) -> None:
        self._client = openai.OpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=0)
        self._model = model
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        try:
            response = self._client.embeddings.create(
                model=self._model,
                input=texts,
                dimensions=self._dimension,
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise EmbeddingError(f"Embedding provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise EmbeddingError(f"Embedding provider API error: {exc}") from exc

        ordered = sorted(response.data, key=lambda item: item.index)
        if len(ordered) != len(texts):
            raise EmbeddingError(
                f"Embedding provider returned {len(ordered)} vectors for {len(texts)} inputs"
            )
        return [list(item.embedding) for item in ordered]
