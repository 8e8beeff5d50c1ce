"""Rank merge for combined search.

Lexical and semantic scores live on different scales, so the merge uses
positions only. Each document takes its best (lowest) 1-based rank across
the two lists. Ties go to the more recently created document, then to the
one found lexically, then to the smaller document id. The reported score
and snippet come from the list that supplied the best rank (semantic on an
equal rank). A document found by both lists appears once.
"""

from collections.abc import Sequence

from legaldocs.database.models import IndexMatch
from legaldocs.search.models import SearchHit


def merge_ranked(
    lexical: Sequence[IndexMatch],
    semantic: Sequence[IndexMatch],
) -> list[SearchHit]:
    lexical_ranks = _ranks(lexical)
    semantic_ranks = _ranks(semantic)
    lexical_by_id = {match.document_id: match for match in lexical}
    semantic_by_id = {match.document_id: match for match in semantic}

    hits: list[SearchHit] = []
    for document_id in {**lexical_by_id, **semantic_by_id}:
        lexical_rank = lexical_ranks.get(document_id)
        semantic_rank = semantic_ranks.get(document_id)
        if semantic_rank is not None and (lexical_rank is None or semantic_rank <= lexical_rank):
            source = semantic_by_id[document_id]
        else:
            source = lexical_by_id[document_id]
        hits.append(
            SearchHit(
                document_id=document_id,
                owner_id=source.owner_id,
                filename=source.filename,
                document_type=source.document_type,
                created_at=source.created_at,
                score=source.score,
                snippet=source.snippet,
                lexical_rank=lexical_rank,
                semantic_rank=semantic_rank,
            )
        )

    hits.sort(key=_sort_key)
    return hits


def _ranks(matches: Sequence[IndexMatch]) -> dict[str, int]:
    ranks: dict[str, int] = {}
    for position, match in enumerate(matches, start=1):
        ranks.setdefault(match.document_id, position)
    return ranks


def _sort_key(hit: SearchHit) -> tuple[int, float, bool, str]:
    return (
        hit.best_rank,
        -hit.created_at.timestamp(),
        hit.lexical_rank is None,
        hit.document_id,
    )
