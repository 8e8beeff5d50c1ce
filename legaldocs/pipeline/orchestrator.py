from collections.abc import Mapping

from legaldocs.broadcasting.base import BaseBroadcaster
from legaldocs.database.models import SearchIndexEntry
from legaldocs.database.repositories.document_repository import DocumentRepository
from legaldocs.documents.exceptions import DocumentStateError
from legaldocs.documents.models import ProcessingStage, ProcessingStatus
from legaldocs.executors.exceptions import InternalStageError, StageError, StageStorageError
from legaldocs.logging.logger import Log
from legaldocs.pipeline.context import PipelineContext
from legaldocs.pipeline.progress import ProgressPolicy, ProgressTracker
from legaldocs.pipeline.steps import PipelineStep
from legaldocs.storage.base import BaseBlobStore
from legaldocs.storage.exceptions import StorageError


class PipelineOrchestrator:
    """Drives one document from pending to completed or failed.

    A document is claimed atomically before any work starts, so concurrent
    ``process`` calls for the same id result in exactly one run. Stage
    failures are terminal: they are persisted on the document and announced
    with a single failed event, never raised to the caller.
    """

    def __init__(
        self,
        *,
        doc_repo: DocumentRepository,
        blob_store: BaseBlobStore,
        broadcaster: BaseBroadcaster,
        steps: Mapping[ProcessingStage, PipelineStep],
        upload_weight: float = 20.0,
        stage_weights: Mapping[ProcessingStage, float] | None = None,
    ) -> None:
        self._doc_repo = doc_repo
        self._blob_store = blob_store
        self._broadcaster = broadcaster
        self._steps = dict(steps)
        self._upload_weight = upload_weight
        self._stage_weights = stage_weights

    def process(self, document_id: str) -> ProcessingStatus | None:
        """Run the pipeline for a pending document.

        Returns the terminal status reached, or None when the document was
        not pending (already running, finished, or unknown).
        """
        document = self._doc_repo.claim_for_processing(document_id)
        if document is None:
            Log.info(f"Document {document_id} is not pending; skipping")
            return None

        variant = document.pipeline_variant
        missing = [stage for stage in variant.stages if stage not in self._steps]
        policy = ProgressPolicy.for_variant(variant, self._upload_weight, self._stage_weights)
        context = PipelineContext(
            document=document,
            tracker=ProgressTracker(document.id, policy, self._broadcaster),
        )
        Log.info(f"Processing document {document.id} ({variant.value} pipeline)")

        try:
            if missing:
                raise InternalStageError(
                    f"No step configured for stage(s): {[stage.value for stage in missing]}"
                )
            context.raw_bytes = self._load_bytes(document.storage_locator)
            for stage in variant.stages:
                context = self._steps[stage].run(context)
            self._doc_repo.mark_completed(document.id, self._index_entries(context))
        except StageError as exc:
            return self._fail(context, exc)
        except DocumentStateError as exc:
            Log.warning(f"Document {document.id} left the processing state: {exc}")
            context.tracker.fail(str(exc), InternalStageError.code)
            return None
        except Exception as exc:
            Log.error(f"Unexpected error processing document {document.id}: {exc!r}")
            return self._fail(context, InternalStageError(str(exc) or exc.__class__.__name__))

        context.tracker.complete()
        Log.info(f"Document {document.id} completed")
        return ProcessingStatus.COMPLETED

    def _load_bytes(self, locator: str) -> bytes:
        try:
            return self._blob_store.get(locator)
        except StorageError as exc:
            raise StageStorageError(f"Cannot read stored file: {exc}") from exc

    def _fail(self, context: PipelineContext, exc: StageError) -> ProcessingStatus:
        document_id = context.document.id
        stage = context.current_stage
        Log.error(f"Document {document_id} failed in {stage.value} stage [{exc.code}]: {exc}")
        try:
            self._doc_repo.mark_failed(document_id, stage, exc.code, str(exc))
        except Exception as persist_exc:
            Log.error(f"Could not record failure for document {document_id}: {persist_exc}")
        context.tracker.fail(str(exc), exc.code, f"{stage.value} stage failed")
        return ProcessingStatus.FAILED

    @staticmethod
    def _index_entries(context: PipelineContext) -> list[SearchIndexEntry]:
        result = context.embedding_result
        if result is None:
            return []
        document = context.document
        document_type = (
            document.document_type
            or (context.analysis.document_type if context.analysis else None)
        )
        return [
            SearchIndexEntry(
                document_id=document.id,
                owner_id=document.owner_id,
                chunk_index=chunk.index,
                chunk_text=chunk.text,
                char_start=chunk.start,
                char_end=chunk.end,
                embedding=vector,
                filename=document.filename,
                document_type=document_type,
            )
            for chunk, vector in zip(result.chunks, result.vectors)
        ]
