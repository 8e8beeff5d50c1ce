from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class SearchMode(str, Enum):
    LEXICAL = "lexical"
    SEMANTIC = "semantic"
    COMBINED = "combined"


@dataclass(frozen=True)
class SearchHit:
    """One document in a ranked result list.

    ``lexical_rank``/``semantic_rank`` are 1-based positions in each source
    list, None when the document did not appear there.
    """

    document_id: str
    owner_id: str
    filename: str
    document_type: str | None
    created_at: datetime
    score: float
    snippet: str
    lexical_rank: int | None = None
    semantic_rank: int | None = None

    @property
    def best_rank(self) -> int:
        ranks = [rank for rank in (self.lexical_rank, self.semantic_rank) if rank is not None]
        return min(ranks)


@dataclass(frozen=True)
class SearchFilters:
    """Filters applied to an already-ranked list; they never reorder it."""

    document_type: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None

    def __post_init__(self) -> None:
        # Bounds without an offset are read as UTC; index timestamps are always aware.
        object.__setattr__(self, "created_from", _as_utc(self.created_from))
        object.__setattr__(self, "created_to", _as_utc(self.created_to))

    def matches(self, hit: SearchHit) -> bool:
        if self.document_type and (hit.document_type or "").lower() != self.document_type.lower():
            return False
        if self.created_from is not None and _as_utc(hit.created_at) < self.created_from:
            return False
        if self.created_to is not None and _as_utc(hit.created_at) > self.created_to:
            return False
        return True


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
