from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from legaldocs.database.models import ChunkMatch, IndexMatch
from legaldocs.database.repositories.search_index_repository import SearchIndexRepository
from legaldocs.embeddings.base import EmbeddingProvider
from legaldocs.embeddings.exceptions import EmbeddingError
from legaldocs.search.engine import (
    SIMILAR_DOCUMENTS_THRESHOLD,
    WITHIN_DOCUMENT_THRESHOLD,
    HybridSearchEngine,
)
from legaldocs.search.exceptions import SearchError
from legaldocs.search.models import SearchFilters, SearchMode

_BASE_TIME = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _match(
    document_id: str,
    document_type: str | None = "lease",
    age_days: int = 0,
    owner_id: str = "o1",
) -> IndexMatch:
    return IndexMatch(
        document_id=document_id,
        owner_id=owner_id,
        filename=f"{document_id}.pdf",
        document_type=document_type,
        created_at=_BASE_TIME - timedelta(days=age_days),
        score=0.5,
        snippet=f"text of {document_id}",
    )


def _make_engine(
    lexical: list[IndexMatch] | None = None,
    semantic: list[IndexMatch] | None = None,
    max_results: int = 20,
) -> tuple[HybridSearchEngine, MagicMock, MagicMock]:
    index_repo = MagicMock(spec=SearchIndexRepository)
    index_repo.lexical_search.return_value = lexical or []
    index_repo.semantic_search.return_value = semantic or []
    provider = MagicMock(spec=EmbeddingProvider)
    provider.embed_text.return_value = [0.1, 0.2, 0.3]
    engine = HybridSearchEngine(
        index_repo,
        provider,
        similarity_threshold=0.6,
        max_results=max_results,
    )
    return engine, index_repo, provider


class TestSearchModes:
    def test_lexical_mode_skips_embedding(self) -> None:
        engine, index_repo, provider = _make_engine(lexical=[_match("a")])

        hits = engine.search("lease", "o1", mode=SearchMode.LEXICAL)

        assert [hit.document_id for hit in hits] == ["a"]
        provider.embed_text.assert_not_called()
        index_repo.semantic_search.assert_not_called()

    def test_semantic_mode_skips_lexical(self) -> None:
        engine, index_repo, provider = _make_engine(semantic=[_match("s")])

        hits = engine.search("lease", "o1", mode=SearchMode.SEMANTIC)

        assert [hit.document_id for hit in hits] == ["s"]
        index_repo.lexical_search.assert_not_called()
        provider.embed_text.assert_called_once_with("lease")
        args = index_repo.semantic_search.call_args.args
        assert args == ([0.1, 0.2, 0.3], "o1", 0.6, 100)

    def test_combined_mode_merges(self) -> None:
        engine, _index_repo, _provider = _make_engine(
            lexical=[_match("a", age_days=2), _match("b", age_days=2)],
            semantic=[_match("b", age_days=2), _match("c", age_days=2)],
        )

        hits = engine.search("lease", "o1")

        assert [hit.document_id for hit in hits] == ["a", "b", "c"]

    def test_blank_query_returns_nothing(self) -> None:
        engine, index_repo, _provider = _make_engine(lexical=[_match("a")])

        assert engine.search("   ", "o1") == []
        index_repo.lexical_search.assert_not_called()

    def test_candidate_pool_is_multiple_of_limit(self) -> None:
        engine, index_repo, _provider = _make_engine()

        engine.search("lease", "o1", mode=SearchMode.LEXICAL, max_results=3)

        index_repo.lexical_search.assert_called_once_with("lease", "o1", 15)


class TestEmbeddingFailure:
    def test_combined_falls_back_to_lexical(self) -> None:
        engine, index_repo, provider = _make_engine(lexical=[_match("a")])
        provider.embed_text.side_effect = EmbeddingError("provider down")

        hits = engine.search("lease", "o1", mode=SearchMode.COMBINED)

        assert [hit.document_id for hit in hits] == ["a"]
        index_repo.semantic_search.assert_not_called()

    def test_semantic_raises(self) -> None:
        engine, _index_repo, provider = _make_engine()
        provider.embed_text.side_effect = EmbeddingError("provider down")

        with pytest.raises(SearchError, match="provider down"):
            engine.search("lease", "o1", mode=SearchMode.SEMANTIC)


class TestFiltersAndTruncation:
    def test_filters_do_not_reorder(self) -> None:
        engine, _index_repo, _provider = _make_engine(
            lexical=[
                _match("a", document_type="contract", age_days=1),
                _match("b", document_type="lease", age_days=1),
                _match("c", document_type="Lease", age_days=1),
            ],
        )

        hits = engine.search(
            "term",
            "o1",
            mode=SearchMode.LEXICAL,
            filters=SearchFilters(document_type="lease"),
        )

        assert [hit.document_id for hit in hits] == ["b", "c"]

    def test_date_range_filter(self) -> None:
        engine, _index_repo, _provider = _make_engine(
            lexical=[_match("recent", age_days=1), _match("old", age_days=90)],
        )

        hits = engine.search(
            "term",
            "o1",
            mode=SearchMode.LEXICAL,
            filters=SearchFilters(created_from=_BASE_TIME - timedelta(days=30)),
        )

        assert [hit.document_id for hit in hits] == ["recent"]

    def test_offset_less_bounds_are_read_as_utc(self) -> None:
        engine, _index_repo, _provider = _make_engine(
            lexical=[_match("recent", age_days=1), _match("old", age_days=90)],
        )
        naive_from = (_BASE_TIME - timedelta(days=30)).replace(tzinfo=None)
        naive_to = _BASE_TIME.replace(tzinfo=None)

        hits = engine.search(
            "term",
            "o1",
            mode=SearchMode.LEXICAL,
            filters=SearchFilters(created_from=naive_from, created_to=naive_to),
        )

        assert [hit.document_id for hit in hits] == ["recent"]

    def test_truncates_after_filtering(self) -> None:
        engine, _index_repo, _provider = _make_engine(
            lexical=[_match(f"d{i}", document_type="lease" if i % 2 else "nda") for i in range(10)],
        )

        hits = engine.search(
            "term",
            "o1",
            mode=SearchMode.LEXICAL,
            filters=SearchFilters(document_type="lease"),
            max_results=3,
        )

        assert [hit.document_id for hit in hits] == ["d1", "d3", "d5"]

    def test_other_owner_rows_are_dropped(self) -> None:
        engine, _index_repo, _provider = _make_engine(
            lexical=[_match("mine"), _match("theirs", owner_id="o2")],
        )

        hits = engine.search("term", "o1", mode=SearchMode.LEXICAL)

        assert [hit.document_id for hit in hits] == ["mine"]

    def test_default_max_results(self) -> None:
        engine, _index_repo, _provider = _make_engine(
            lexical=[_match(f"d{i}") for i in range(5)],
            max_results=2,
        )

        assert len(engine.search("term", "o1", mode=SearchMode.LEXICAL)) == 2


class TestFindSimilar:
    def test_uses_first_chunk_and_excludes_self(self) -> None:
        engine, index_repo, _provider = _make_engine(semantic=[_match("other")])
        index_repo.first_chunk_embedding.return_value = [0.5, 0.5]

        hits = engine.find_similar("d1", "o1", max_results=4)

        assert [hit.document_id for hit in hits] == ["other"]
        index_repo.semantic_search.assert_called_once_with(
            [0.5, 0.5], "o1", SIMILAR_DOCUMENTS_THRESHOLD, 4, exclude_document_id="d1"
        )

    def test_unindexed_document_has_no_neighbours(self) -> None:
        engine, index_repo, _provider = _make_engine()
        index_repo.first_chunk_embedding.return_value = None

        assert engine.find_similar("d1", "o1") == []
        index_repo.semantic_search.assert_not_called()


class TestSearchWithin:
    def test_returns_passages(self) -> None:
        engine, index_repo, _provider = _make_engine()
        passage = ChunkMatch(chunk_index=2, chunk_text="rent is due", char_start=10, char_end=21, score=0.8)
        index_repo.search_chunks.return_value = [passage]

        result = engine.search_within("d1", "o1", "rent", max_results=3)

        assert result == [passage]
        index_repo.search_chunks.assert_called_once_with(
            "d1", "o1", [0.1, 0.2, 0.3], WITHIN_DOCUMENT_THRESHOLD, 3
        )

    def test_embedding_failure_raises(self) -> None:
        engine, _index_repo, provider = _make_engine()
        provider.embed_text.side_effect = EmbeddingError("down")

        with pytest.raises(SearchError):
            engine.search_within("d1", "o1", "rent")

    def test_blank_query(self) -> None:
        engine, index_repo, _provider = _make_engine()

        assert engine.search_within("d1", "o1", " ") == []
        index_repo.search_chunks.assert_not_called()
