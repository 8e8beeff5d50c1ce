from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class JobRecord:
    """Represents a row from the processing_jobs table."""

    id: int
    document_id: str
    status: str
    error_message: str | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class UsageRecord:
    """Represents a row from the usage_records table."""

    owner_id: str
    resource_kind: str
    period_start: date
    usage_count: int


@dataclass
class SearchIndexEntry:
    """One chunk of a completed document, as stored in search_index_entries."""

    document_id: str
    owner_id: str
    chunk_index: int
    chunk_text: str
    char_start: int
    char_end: int
    embedding: list[float]
    filename: str
    document_type: str | None = None
    created_at: datetime | None = None


@dataclass
class IndexMatch:
    """Best-scoring chunk of one document for a query."""

    document_id: str
    owner_id: str
    filename: str
    document_type: str | None
    created_at: datetime
    score: float
    snippet: str


@dataclass
class ChunkMatch:
    chunk_index: int
    chunk_text: str
    char_start: int
    char_end: int
    score: float
