from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Contract for text embedding providers.

    Documents and search queries must be embedded by the same provider so
    their vectors are comparable.
    """

    @abstractmethod
    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts; one vector per input, in input order.

        Raises:
            EmbeddingError: if the provider call fails.
        """

    def embed_text(self, text: str) -> list[float]:
        return self.embed_batch([text])[0]

    @property
    @abstractmethod
    def dimension(self) -> int: ...

    @property
    @abstractmethod
    def model_name(self) -> str: ...
