from datetime import datetime
from typing import Any

from pydantic import BaseModel

from legaldocs.documents.models import Document
from legaldocs.quota.models import UsageLimit
from legaldocs.search.models import SearchHit


class DocumentResponse(BaseModel):
    id: str
    owner_id: str
    filename: str
    content_type: str
    file_size: int
    document_type: str | None
    pipeline_variant: str
    is_public: bool
    processing_status: str
    processing_stage: str | None
    text_quality_score: float | None
    analysis: dict[str, Any] | None
    embedding_count: int
    failed_stage: str | None
    error_code: str | None
    error_message: str | None
    created_at: datetime | None
    updated_at: datetime | None
    completed_at: datetime | None

    @classmethod
    def from_document(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=document.id,
            owner_id=document.owner_id,
            filename=document.filename,
            content_type=document.content_type,
            file_size=document.file_size,
            document_type=document.document_type,
            pipeline_variant=document.pipeline_variant.value,
            is_public=document.is_public,
            processing_status=document.processing_status.value,
            processing_stage=(
                document.processing_stage.value if document.processing_stage else None
            ),
            text_quality_score=document.text_quality_score,
            analysis=document.analysis,
            embedding_count=document.embedding_count,
            failed_stage=document.failed_stage.value if document.failed_stage else None,
            error_code=document.error_code,
            error_message=document.error_message,
            created_at=document.created_at,
            updated_at=document.updated_at,
            completed_at=document.completed_at,
        )


class UsageResponse(BaseModel):
    allowed: bool
    limit: int
    current: int
    remaining: int
    percentage: float
    tier: str
    warning: bool
    degraded: bool

    @classmethod
    def from_usage(cls, usage: UsageLimit) -> "UsageResponse":
        return cls(
            allowed=usage.allowed,
            limit=usage.limit,
            current=usage.current,
            remaining=usage.remaining,
            percentage=round(usage.percentage, 2),
            tier=usage.tier,
            warning=usage.warning,
            degraded=usage.degraded,
        )


class UploadResponse(BaseModel):
    document: DocumentResponse
    usage: UsageResponse


class SearchHitResponse(BaseModel):
    document_id: str
    filename: str
    document_type: str | None
    created_at: datetime
    score: float
    snippet: str
    lexical_rank: int | None
    semantic_rank: int | None

    @classmethod
    def from_hit(cls, hit: SearchHit) -> "SearchHitResponse":
        return cls(
            document_id=hit.document_id,
            filename=hit.filename,
            document_type=hit.document_type,
            created_at=hit.created_at,
            score=hit.score,
            snippet=hit.snippet,
            lexical_rank=hit.lexical_rank,
            semantic_rank=hit.semantic_rank,
        )


class SearchResponse(BaseModel):
    query: str
    mode: str
    results: list[SearchHitResponse]


class PassageResponse(BaseModel):
    chunk_index: int
    text: str
    char_start: int
    char_end: int
    score: float


class UsageStatsResponse(BaseModel):
    owner_id: str
    usage: dict[str, int]
