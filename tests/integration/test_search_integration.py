from collections.abc import Callable

import pytest

from legaldocs.database.models import SearchIndexEntry
from legaldocs.database.repositories.document_repository import DocumentRepository
from legaldocs.database.repositories.search_index_repository import SearchIndexRepository
from legaldocs.documents.models import Document
from legaldocs.embeddings.example_provider import ExampleEmbeddingProvider
from legaldocs.search.engine import HybridSearchEngine
from legaldocs.search.models import SearchFilters, SearchMode

_LEASE_CHUNKS = [
    "The tenant pays rent monthly to the landlord.",
    "The lease term is twelve months from the start date.",
]
_NDA_CHUNKS = ["Confidential information shall not be disclosed to third parties."]


def _complete(document: Document, chunks: list[str]) -> None:
    provider = ExampleEmbeddingProvider()
    repo = DocumentRepository()
    repo.claim_for_processing(document.id)
    offset = 0
    entries = []
    for index, text in enumerate(chunks):
        entries.append(
            SearchIndexEntry(
                document_id=document.id,
                owner_id=document.owner_id,
                chunk_index=index,
                chunk_text=text,
                char_start=offset,
                char_end=offset + len(text),
                embedding=provider.embed_text(text),
                filename=document.filename,
                document_type=document.document_type,
            )
        )
        offset += len(text) + 1
    repo.mark_completed(document.id, entries)


@pytest.fixture
def indexed(seed_document: Callable[..., Document]) -> tuple[Document, Document]:
    lease = seed_document(filename="lease.txt", document_type="lease")
    nda = seed_document(filename="nda.txt", document_type="nda")
    _complete(lease, _LEASE_CHUNKS)
    _complete(nda, _NDA_CHUNKS)
    return lease, nda


def _engine() -> HybridSearchEngine:
    return HybridSearchEngine(SearchIndexRepository(), ExampleEmbeddingProvider())


@pytest.mark.integration
class TestIndexQueries:
    def test_lexical_prefix_match(self, owner_id: str, indexed: tuple[Document, Document]) -> None:
        lease, _nda = indexed

        matches = SearchIndexRepository().lexical_search("tenan", owner_id, 10)

        assert [match.document_id for match in matches] == [lease.id]
        assert "tenant" in matches[0].snippet

    def test_filename_is_searchable(self, owner_id: str, indexed: tuple[Document, Document]) -> None:
        _lease, nda = indexed

        matches = SearchIndexRepository().lexical_search("nda", owner_id, 10)

        assert nda.id in [match.document_id for match in matches]

    def test_other_owner_sees_nothing(self, indexed: tuple[Document, Document]) -> None:
        assert SearchIndexRepository().lexical_search("tenant", "someone-else", 10) == []

    def test_first_chunk_embedding(self, owner_id: str, indexed: tuple[Document, Document]) -> None:
        lease, _nda = indexed

        vector = SearchIndexRepository().first_chunk_embedding(lease.id, owner_id)

        assert vector is not None
        assert len(vector) == 1536


@pytest.mark.integration
class TestHybridSearch:
    def test_semantic_ranks_closest_document_first(
        self, owner_id: str, indexed: tuple[Document, Document]
    ) -> None:
        lease, _nda = indexed

        hits = _engine().search(
            "tenant pays rent monthly to the landlord", owner_id, mode=SearchMode.SEMANTIC
        )

        assert hits[0].document_id == lease.id
        assert hits[0].semantic_rank == 1

    def test_combined_returns_each_document_once(
        self, owner_id: str, indexed: tuple[Document, Document]
    ) -> None:
        hits = _engine().search("confidential tenant", owner_id)

        ids = [hit.document_id for hit in hits]
        assert len(ids) == len(set(ids))
        assert set(ids) == {document.id for document in indexed}

    def test_type_filter(self, owner_id: str, indexed: tuple[Document, Document]) -> None:
        _lease, nda = indexed

        hits = _engine().search(
            "confidential tenant", owner_id, filters=SearchFilters(document_type="nda")
        )

        assert [hit.document_id for hit in hits] == [nda.id]

    def test_search_within_document(
        self, owner_id: str, indexed: tuple[Document, Document]
    ) -> None:
        lease, _nda = indexed

        passages = _engine().search_within(lease.id, owner_id, "lease term twelve months")

        assert passages[0].chunk_index == 1
