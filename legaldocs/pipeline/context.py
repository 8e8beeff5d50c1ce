from dataclasses import dataclass

from legaldocs.ai.models import DocumentAnalysis, EntitySet
from legaldocs.documents.models import Document, ProcessingStage
from legaldocs.executors.models import EmbeddingResult, OcrResult
from legaldocs.pipeline.progress import ProgressTracker


@dataclass(slots=True)
class PipelineContext:
    document: Document
    tracker: ProgressTracker
    current_stage: ProcessingStage = ProcessingStage.OCR
    raw_bytes: bytes = b""
    ocr_result: OcrResult | None = None
    analysis: DocumentAnalysis | None = None
    entities: EntitySet | None = None
    embedding_result: EmbeddingResult | None = None
