from dataclasses import dataclass

from legaldocs.broadcasting.base import BaseBroadcaster
from legaldocs.broadcasting.factory import BroadcasterFactory
from legaldocs.config.settings import Settings
from legaldocs.database.repositories.document_repository import DocumentRepository
from legaldocs.database.repositories.job_repository import JobRepository
from legaldocs.database.repositories.search_index_repository import SearchIndexRepository
from legaldocs.database.repositories.usage_repository import UsageRepository
from legaldocs.documents.models import PipelineVariant, ProcessingStage
from legaldocs.embeddings.base import EmbeddingProvider
from legaldocs.embeddings.factory import EmbeddingProviderFactory
from legaldocs.ingestion.service import IngestionService
from legaldocs.pipeline.progress import ProgressPolicy
from legaldocs.quota.ledger import QuotaLedger
from legaldocs.search.engine import HybridSearchEngine
from legaldocs.storage.base import BaseBlobStore
from legaldocs.storage.factory import BlobStoreFactory


@dataclass
class ServiceContainer:
    """Everything the HTTP layer needs, built once per process."""

    settings: Settings
    quota: QuotaLedger
    ingestion: IngestionService
    search: HybridSearchEngine
    broadcaster: BaseBroadcaster
    blob_store: BaseBlobStore
    embedding_provider: EmbeddingProvider

    def progress_policy(self, variant: PipelineVariant) -> ProgressPolicy:
        return ProgressPolicy.for_variant(
            variant,
            self.settings.pipeline_upload_weight,
            {
                ProcessingStage.OCR: self.settings.pipeline_ocr_weight,
                ProcessingStage.ANALYSIS: self.settings.pipeline_analysis_weight,
                ProcessingStage.EMBEDDING: self.settings.pipeline_embedding_weight,
            },
        )


def build_container(settings: Settings) -> ServiceContainer:
    usage_repo = UsageRepository()
    index_repo = SearchIndexRepository()
    broadcaster = BroadcasterFactory.create(settings)
    blob_store = BlobStoreFactory.create(settings)
    embedding_provider = EmbeddingProviderFactory.create(settings)
    quota = QuotaLedger(
        usage_repo,
        timeout_seconds=settings.quota_check_timeout_seconds,
        warning_percentage=settings.quota_warning_percentage,
    )
    return ServiceContainer(
        settings=settings,
        quota=quota,
        ingestion=IngestionService(
            quota=quota,
            blob_store=blob_store,
            doc_repo=DocumentRepository(),
            job_repo=JobRepository(),
            index_repo=index_repo,
            broadcaster=broadcaster,
            upload_weight=settings.pipeline_upload_weight,
        ),
        search=HybridSearchEngine(
            index_repo,
            embedding_provider,
            similarity_threshold=settings.search_similarity_threshold,
            max_results=settings.search_max_results,
        ),
        broadcaster=broadcaster,
        blob_store=blob_store,
        embedding_provider=embedding_provider,
    )
