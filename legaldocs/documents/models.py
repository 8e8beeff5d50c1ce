from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ProcessingStatus.COMPLETED, ProcessingStatus.FAILED)


class ProcessingStage(str, Enum):
    OCR = "ocr"
    ANALYSIS = "analysis"
    EMBEDDING = "embedding"


class PipelineVariant(str, Enum):
    """Which stages a document goes through.

    ``basic`` skips embedding and is used for uploads that should not be
    searchable; ``full`` runs every stage and indexes the result.
    """

    BASIC = "basic"
    FULL = "full"

    @property
    def stages(self) -> tuple[ProcessingStage, ...]:
        if self is PipelineVariant.BASIC:
            return (ProcessingStage.OCR, ProcessingStage.ANALYSIS)
        return (ProcessingStage.OCR, ProcessingStage.ANALYSIS, ProcessingStage.EMBEDDING)


@dataclass(frozen=True)
class Document:
    """A submitted file and everything the pipeline has learned about it."""

    id: str
    owner_id: str
    filename: str
    content_type: str
    file_size: int
    storage_locator: str
    processing_status: ProcessingStatus = ProcessingStatus.PENDING
    processing_stage: ProcessingStage | None = None
    pipeline_variant: PipelineVariant = PipelineVariant.FULL
    document_type: str | None = None
    is_public: bool = False
    extracted_text: str | None = None
    text_quality_score: float | None = None
    analysis: dict[str, Any] | None = None
    embedding_count: int = 0
    failed_stage: ProcessingStage | None = None
    error_code: str | None = None
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None
