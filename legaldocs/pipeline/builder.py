from legaldocs.ai.factory import ChatClientFactory
from legaldocs.broadcasting.base import BaseBroadcaster
from legaldocs.broadcasting.factory import BroadcasterFactory
from legaldocs.config.settings import Settings
from legaldocs.database.repositories.document_repository import DocumentRepository
from legaldocs.documents.models import ProcessingStage
from legaldocs.embeddings.base import EmbeddingProvider
from legaldocs.embeddings.factory import EmbeddingProviderFactory
from legaldocs.executors.analysis import AnalysisExecutor
from legaldocs.executors.embedding import EmbeddingExecutor
from legaldocs.executors.entities import EntityExtractionExecutor
from legaldocs.executors.ocr import OcrExecutor
from legaldocs.extraction.factory import TextExtractorFactory
from legaldocs.pipeline.orchestrator import PipelineOrchestrator
from legaldocs.pipeline.steps import AnalysisStep, EmbeddingStep, OcrStep
from legaldocs.storage.base import BaseBlobStore
from legaldocs.storage.factory import BlobStoreFactory


def build_orchestrator(
    settings: Settings,
    *,
    broadcaster: BaseBroadcaster | None = None,
    blob_store: BaseBlobStore | None = None,
    embedding_provider: EmbeddingProvider | None = None,
) -> PipelineOrchestrator:
    """Build a PipelineOrchestrator with all adapters configured from settings."""
    doc_repo = DocumentRepository()
    timeout = settings.stage_timeout_seconds

    ocr_executor = OcrExecutor(
        pdf_extractor=TextExtractorFactory.create_pdf(settings),
        image_extractor=TextExtractorFactory.create_image(settings),
        text_extractor=TextExtractorFactory.create_text(settings),
    )
    chat_client = ChatClientFactory.create(settings)
    model = ChatClientFactory.model_name(settings)
    analysis_executor = AnalysisExecutor(
        client=chat_client,
        model=model,
        temperature=settings.ai_temperature,
        max_input_chars=settings.ai_max_input_chars,
    )
    entity_executor = EntityExtractionExecutor(
        client=chat_client,
        model=model,
        temperature=settings.ai_temperature,
        max_input_chars=settings.ai_max_input_chars,
    )
    embedding_executor = EmbeddingExecutor(
        embedding_provider or EmbeddingProviderFactory.create(settings),
        chunk_size=settings.embedding_chunk_size,
        max_chunks=settings.embedding_max_chunks,
        batch_size=settings.embedding_batch_size,
    )

    return PipelineOrchestrator(
        doc_repo=doc_repo,
        blob_store=blob_store or BlobStoreFactory.create(settings),
        broadcaster=broadcaster or BroadcasterFactory.create(settings),
        steps={
            ProcessingStage.OCR: OcrStep(ocr_executor, doc_repo, timeout),
            ProcessingStage.ANALYSIS: AnalysisStep(
                analysis_executor, entity_executor, doc_repo, timeout
            ),
            ProcessingStage.EMBEDDING: EmbeddingStep(embedding_executor, doc_repo, timeout),
        },
        upload_weight=settings.pipeline_upload_weight,
        stage_weights={
            ProcessingStage.OCR: settings.pipeline_ocr_weight,
            ProcessingStage.ANALYSIS: settings.pipeline_analysis_weight,
            ProcessingStage.EMBEDDING: settings.pipeline_embedding_weight,
        },
    )
