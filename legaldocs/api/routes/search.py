from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Query

from legaldocs.api.dependencies import Container, OwnerId
from legaldocs.api.schemas import SearchHitResponse, SearchResponse, UsageStatsResponse
from legaldocs.search.models import SearchFilters, SearchMode

router = APIRouter(tags=["search"])


@router.get("/search", response_model=SearchResponse)
def search_documents(
    container: Container,
    owner_id: OwnerId,
    q: Annotated[str, Query(min_length=1)],
    mode: SearchMode = SearchMode.COMBINED,
    document_type: str | None = None,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> SearchResponse:
    """Search the caller's completed documents; filters never reorder results."""
    hits = container.search.search(
        q,
        owner_id,
        mode=mode,
        filters=SearchFilters(
            document_type=document_type,
            created_from=created_from,
            created_to=created_to,
        ),
        max_results=limit,
    )
    return SearchResponse(
        query=q,
        mode=mode.value,
        results=[SearchHitResponse.from_hit(hit) for hit in hits],
    )


@router.get("/usage", response_model=UsageStatsResponse)
def usage_stats(container: Container, owner_id: OwnerId) -> UsageStatsResponse:
    stats = container.quota.usage_stats(owner_id)
    return UsageStatsResponse(
        owner_id=owner_id,
        usage={kind.value: count for kind, count in stats.items()},
    )
