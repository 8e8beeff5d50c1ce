from legaldocs.database.models import ChunkMatch, IndexMatch
from legaldocs.database.repositories.search_index_repository import SearchIndexRepository
from legaldocs.embeddings.base import EmbeddingProvider
from legaldocs.embeddings.exceptions import EmbeddingError
from legaldocs.logging.logger import Log
from legaldocs.search.exceptions import SearchError
from legaldocs.search.merge import merge_ranked
from legaldocs.search.models import SearchFilters, SearchHit, SearchMode

SIMILAR_DOCUMENTS_THRESHOLD = 0.6
WITHIN_DOCUMENT_THRESHOLD = 0.5


class HybridSearchEngine:
    """Lexical, semantic and combined search over one owner's indexed documents.

    Queries are embedded with the same provider used for documents. Filters
    run after ranking, on a candidate pool ``candidate_multiplier`` times
    larger than the requested result count, and truncation happens last.
    """

    def __init__(
        self,
        index_repo: SearchIndexRepository,
        embedding_provider: EmbeddingProvider,
        *,
        similarity_threshold: float = 0.6,
        max_results: int = 20,
        candidate_multiplier: int = 5,
    ) -> None:
        self._index_repo = index_repo
        self._embedding_provider = embedding_provider
        self._similarity_threshold = similarity_threshold
        self._max_results = max_results
        self._candidate_multiplier = max(1, candidate_multiplier)

    def search(
        self,
        query: str,
        owner_id: str,
        mode: SearchMode = SearchMode.COMBINED,
        filters: SearchFilters | None = None,
        max_results: int | None = None,
    ) -> list[SearchHit]:
        if not query.strip():
            return []
        limit = max_results or self._max_results
        candidates = limit * self._candidate_multiplier

        lexical: list[IndexMatch] = []
        if mode in (SearchMode.LEXICAL, SearchMode.COMBINED):
            lexical = self._index_repo.lexical_search(query, owner_id, candidates)

        semantic: list[IndexMatch] = []
        if mode in (SearchMode.SEMANTIC, SearchMode.COMBINED):
            try:
                query_vector = self._embedding_provider.embed_text(query)
            except EmbeddingError as exc:
                if mode is SearchMode.SEMANTIC:
                    raise SearchError(f"Cannot embed query: {exc}") from exc
                Log.warning(f"Query embedding failed, falling back to lexical results: {exc}")
            else:
                semantic = self._index_repo.semantic_search(
                    query_vector, owner_id, self._similarity_threshold, candidates
                )

        ranked = merge_ranked(lexical, semantic)
        filters = filters or SearchFilters()
        hits = [hit for hit in ranked if hit.owner_id == owner_id and filters.matches(hit)]
        Log.info(
            f"Search ({mode.value}) for owner {owner_id}: {len(lexical)} lexical, "
            f"{len(semantic)} semantic, {len(hits)} after filters"
        )
        return hits[:limit]

    def find_similar(
        self,
        document_id: str,
        owner_id: str,
        max_results: int = 5,
    ) -> list[SearchHit]:
        """Documents whose content is close to this document's first chunk, excluding itself."""
        vector = self._index_repo.first_chunk_embedding(document_id, owner_id)
        if vector is None:
            return []
        matches = self._index_repo.semantic_search(
            vector,
            owner_id,
            SIMILAR_DOCUMENTS_THRESHOLD,
            max_results,
            exclude_document_id=document_id,
        )
        return merge_ranked([], matches)

    def search_within(
        self,
        document_id: str,
        owner_id: str,
        query: str,
        max_results: int = 10,
    ) -> list[ChunkMatch]:
        """Passages of one document that are semantically close to ``query``."""
        if not query.strip():
            return []
        try:
            query_vector = self._embedding_provider.embed_text(query)
        except EmbeddingError as exc:
            raise SearchError(f"Cannot embed query: {exc}") from exc
        return self._index_repo.search_chunks(
            document_id, owner_id, query_vector, WITHIN_DOCUMENT_THRESHOLD, max_results
        )
