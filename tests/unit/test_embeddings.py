from unittest.mock import MagicMock, patch

import numpy as np
import openai
import pytest

from legaldocs.embeddings.chunking import split_into_chunks
from legaldocs.embeddings.example_provider import ExampleEmbeddingProvider
from legaldocs.embeddings.exceptions import EmbeddingError
from legaldocs.embeddings.factory import EmbeddingProviderFactory
from legaldocs.embeddings.openai_provider import OpenAIEmbeddingProvider

_OPENAI_TARGET = "legaldocs.embeddings.openai_provider.openai.OpenAI"


class TestSplitIntoChunks:
    def test_packs_sentences_greedily(self) -> None:
        chunks = split_into_chunks("One. Two. Three.", max_chars=10)
        assert [c.text for c in chunks] == ["One. Two.", "Three."]
        assert [c.index for c in chunks] == [0, 1]

    def test_chunks_are_exact_slices(self) -> None:
        text = "The tenant pays rent.  The landlord repairs the roof!\nNotices go by mail?"
        for chunk in split_into_chunks(text, max_chars=30):
            assert text[chunk.start:chunk.end] == chunk.text
            assert len(chunk.text) <= 30

    def test_hard_splits_long_words(self) -> None:
        chunks = split_into_chunks("abcdefghijkl", max_chars=5)
        assert [c.text for c in chunks] == ["abcde", "fghij", "kl"]

    def test_blank_text_has_no_chunks(self) -> None:
        assert split_into_chunks("   \n\t ") == []

    def test_rejects_non_positive_size(self) -> None:
        with pytest.raises(ValueError):
            split_into_chunks("text", max_chars=0)


class TestExampleEmbeddingProvider:
    def test_vectors_are_unit_length(self) -> None:
        vector = ExampleEmbeddingProvider(dimension=64).embed_text("lease agreement rent")
        assert len(vector) == 64
        assert np.linalg.norm(vector) == pytest.approx(1.0)

    def test_deterministic(self) -> None:
        provider = ExampleEmbeddingProvider(dimension=64)
        assert provider.embed_text("Rent due") == provider.embed_text("rent DUE")

    def test_shared_words_are_similar(self) -> None:
        provider = ExampleEmbeddingProvider(dimension=256)
        a, b, c = provider.embed_batch(
            ["tenant pays monthly rent", "monthly rent for tenant", "xylophone quartz"]
        )
        assert float(np.dot(a, b)) > float(np.dot(a, c))

    def test_empty_text_still_has_direction(self) -> None:
        vector = ExampleEmbeddingProvider(dimension=8).embed_text("")
        assert vector[0] == 1.0


class TestOpenAIEmbeddingProvider:
    def test_orders_by_index_and_passes_dimension(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = MagicMock(
            data=[MagicMock(index=1, embedding=[0.0, 1.0]), MagicMock(index=0, embedding=[1.0, 0.0])]
        )
        with patch(_OPENAI_TARGET, return_value=mock_client):
            provider = OpenAIEmbeddingProvider(api_key="k", dimension=2)
            vectors = provider.embed_batch(["a", "b"])

        assert vectors == [[1.0, 0.0], [0.0, 1.0]]
        assert mock_client.embeddings.create.call_args.kwargs["dimensions"] == 2

    def test_count_mismatch(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = MagicMock(
            data=[MagicMock(index=0, embedding=[1.0])]
        )
        with patch(_OPENAI_TARGET, return_value=mock_client):
            provider = OpenAIEmbeddingProvider(api_key="k", dimension=1)
            with pytest.raises(EmbeddingError, match="1 vectors for 2 inputs"):
                provider.embed_batch(["a", "b"])

    def test_network_error(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.side_effect = openai.APIConnectionError(request=MagicMock())
        with patch(_OPENAI_TARGET, return_value=mock_client):
            provider = OpenAIEmbeddingProvider(api_key="k")
            with pytest.raises(EmbeddingError, match="network error"):
                provider.embed_text("a")

    def test_empty_batch_skips_call(self) -> None:
        mock_client = MagicMock()
        with patch(_OPENAI_TARGET, return_value=mock_client):
            assert OpenAIEmbeddingProvider(api_key="k").embed_batch([]) == []
        mock_client.embeddings.create.assert_not_called()


class TestEmbeddingProviderFactory:
    def test_example(self) -> None:
        settings = MagicMock(embedding_provider="example", embedding_dimension=32)
        provider = EmbeddingProviderFactory.create(settings)
        assert isinstance(provider, ExampleEmbeddingProvider)
        assert provider.dimension == 32

    def test_openai_requires_key(self) -> None:
        settings = MagicMock(embedding_provider="openai", ai_openai_api_key="")
        with pytest.raises(ValueError, match="AI_OPENAI_API_KEY"):
            EmbeddingProviderFactory.create(settings)

    def test_unknown(self) -> None:
        settings = MagicMock(embedding_provider="word2vec")
        with pytest.raises(ValueError, match="Unknown embedding provider"):
            EmbeddingProviderFactory.create(settings)
