from abc import ABC, abstractmethod

from legaldocs.ai.models import DocumentAnalysis, EntitySet
from legaldocs.database.repositories.document_repository import DocumentRepository
from legaldocs.documents.models import ProcessingStage
from legaldocs.executors.analysis import AnalysisExecutor
from legaldocs.executors.base import run_with_timeout
from legaldocs.executors.embedding import EmbeddingExecutor
from legaldocs.executors.entities import EntityExtractionExecutor
from legaldocs.executors.models import AnalysisInput, OcrInput
from legaldocs.executors.ocr import OcrExecutor
from legaldocs.logging.logger import Log
from legaldocs.pipeline.context import PipelineContext

# Share of the analysis stage spent on analysis; entity extraction gets the rest.
_ANALYSIS_SHARE = 0.7


class PipelineStep(ABC):
    stage: ProcessingStage

    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError

    def _enter(self, context: PipelineContext, doc_repo: DocumentRepository) -> None:
        context.current_stage = self.stage
        doc_repo.set_stage(context.document.id, self.stage)
        context.tracker.reporter(self.stage)(0.0, f"Starting {self.stage.value}")
        Log.info(f"Document {context.document.id}: {self.stage.value} stage started")


class OcrStep(PipelineStep):
    stage = ProcessingStage.OCR

    def __init__(
        self,
        executor: OcrExecutor,
        doc_repo: DocumentRepository,
        timeout_seconds: float,
    ) -> None:
        self._executor = executor
        self._doc_repo = doc_repo
        self._timeout_seconds = timeout_seconds

    def run(self, context: PipelineContext) -> PipelineContext:
        self._enter(context, self._doc_repo)
        document = context.document
        result = run_with_timeout(
            self._executor,
            OcrInput(
                data=context.raw_bytes,
                content_type=document.content_type,
                filename=document.filename,
            ),
            context.tracker.reporter(self.stage),
            self._timeout_seconds,
        )
        self._doc_repo.save_ocr_result(document.id, result.text, result.quality_score)
        context.ocr_result = result
        Log.info(
            f"Document {document.id}: extracted {len(result.text)} chars from "
            f"{result.page_count} page(s), quality {result.quality_score:.2f}"
        )
        return context


class AnalysisStep(PipelineStep):
    """Runs analysis, then entity extraction, inside the analysis share of progress."""

    stage = ProcessingStage.ANALYSIS

    def __init__(
        self,
        analysis_executor: AnalysisExecutor,
        entity_executor: EntityExtractionExecutor,
        doc_repo: DocumentRepository,
        timeout_seconds: float,
    ) -> None:
        self._analysis_executor = analysis_executor
        self._entity_executor = entity_executor
        self._doc_repo = doc_repo
        self._timeout_seconds = timeout_seconds

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.ocr_result is None:
            raise ValueError("PipelineContext.ocr_result must be set before analysis")
        self._enter(context, self._doc_repo)
        document = context.document
        text = context.ocr_result.text

        analysis: DocumentAnalysis = run_with_timeout(
            self._analysis_executor,
            AnalysisInput(text=text, declared_type=document.document_type),
            context.tracker.reporter(self.stage, 0.0, _ANALYSIS_SHARE),
            self._timeout_seconds,
        )
        entities: EntitySet = run_with_timeout(
            self._entity_executor,
            text,
            context.tracker.reporter(self.stage, _ANALYSIS_SHARE, 1.0),
            self._timeout_seconds,
        )

        payload = analysis.to_dict()
        payload["entities"] = entities.to_dict()
        self._doc_repo.save_analysis(document.id, payload, analysis.document_type)
        context.analysis = analysis
        context.entities = entities
        Log.info(
            f"Document {document.id}: analyzed as {analysis.document_type} "
            f"(confidence {analysis.confidence:.2f})"
        )
        return context


class EmbeddingStep(PipelineStep):
    stage = ProcessingStage.EMBEDDING

    def __init__(
        self,
        executor: EmbeddingExecutor,
        doc_repo: DocumentRepository,
        timeout_seconds: float,
    ) -> None:
        self._executor = executor
        self._doc_repo = doc_repo
        self._timeout_seconds = timeout_seconds

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.ocr_result is None:
            raise ValueError("PipelineContext.ocr_result must be set before embedding")
        self._enter(context, self._doc_repo)
        result = run_with_timeout(
            self._executor,
            context.ocr_result.text,
            context.tracker.reporter(self.stage),
            self._timeout_seconds,
        )
        context.embedding_result = result
        Log.info(f"Document {context.document.id}: embedded {result.count} chunk(s)")
        return context
