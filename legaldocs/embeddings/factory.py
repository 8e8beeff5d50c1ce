from legaldocs.config.settings import Settings
from legaldocs.embeddings.base import EmbeddingProvider
from legaldocs.embeddings.example_provider import ExampleEmbeddingProvider
from legaldocs.embeddings.openai_provider import OpenAIEmbeddingProvider


class EmbeddingProviderFactory:
    """Creates the configured embedding provider."""

    @classmethod
    def create(cls, settings: Settings) -> EmbeddingProvider:
        provider = settings.embedding_provider.lower().strip()
        if provider == "example":
            return ExampleEmbeddingProvider(dimension=settings.embedding_dimension)
        if provider == "openai":
            if not settings.ai_openai_api_key:
                raise ValueError(
                    "AI_OPENAI_API_KEY is required when EMBEDDING_PROVIDER=openai"
                )
            return OpenAIEmbeddingProvider(
                api_key=settings.ai_openai_api_key,
                model=settings.embedding_model,
                dimension=settings.embedding_dimension,
                timeout_seconds=settings.embedding_timeout_seconds,
            )
        raise ValueError(
            f"Unknown embedding provider '{provider}'. Choose from: ['example', 'openai']"
        )
