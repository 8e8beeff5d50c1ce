import uuid

from legaldocs.broadcasting.base import BaseBroadcaster
from legaldocs.broadcasting.events import EventStage, StageEvent
from legaldocs.database.repositories.document_repository import DocumentRepository
from legaldocs.database.repositories.job_repository import JobRepository
from legaldocs.database.repositories.search_index_repository import SearchIndexRepository
from legaldocs.documents.models import Document
from legaldocs.ingestion.exceptions import FileTooLargeError
from legaldocs.ingestion.models import UploadReceipt, UploadRequest
from legaldocs.logging.logger import Log
from legaldocs.quota.exceptions import QuotaExceededError
from legaldocs.quota.ledger import QuotaLedger
from legaldocs.quota.models import ResourceKind
from legaldocs.storage.base import BaseBlobStore
from legaldocs.storage.exceptions import StorageError


class IngestionService:
    """Admits uploads and hands them to the background pipeline.

    Admission order: quota check, size ceiling, blob write, document row,
    job, then usage accounting. A rejection before the blob write leaves no
    trace; a failure after it is rolled back before ``StorageError`` is
    raised. Usage is counted only once the document is durably queued.
    """

    def __init__(
        self,
        *,
        quota: QuotaLedger,
        blob_store: BaseBlobStore,
        doc_repo: DocumentRepository,
        job_repo: JobRepository,
        index_repo: SearchIndexRepository,
        broadcaster: BaseBroadcaster,
        upload_weight: float = 20.0,
    ) -> None:
        self._quota = quota
        self._blob_store = blob_store
        self._doc_repo = doc_repo
        self._job_repo = job_repo
        self._index_repo = index_repo
        self._broadcaster = broadcaster
        self._upload_weight = upload_weight

    def submit(self, request: UploadRequest) -> UploadReceipt:
        """Admit an upload.

        Raises:
            QuotaExceededError: the owner has no uploads left this period.
            FileTooLargeError: the file exceeds the tier's size ceiling.
            StorageError: the file or its document could not be stored.
        """
        owner_id = request.owner_id
        usage = self._quota.check_limit(owner_id, ResourceKind.DOCUMENT_UPLOAD)
        if not usage.allowed:
            Log.info(
                f"Upload rejected for owner {owner_id}: quota exhausted "
                f"({usage.current}/{usage.limit})"
            )
            raise QuotaExceededError(ResourceKind.DOCUMENT_UPLOAD.value, usage)

        file_size = len(request.data)
        max_file_size = usage.max_file_size
        if max_file_size is None:
            max_file_size = self._quota.max_file_size(owner_id)
        if file_size > max_file_size:
            Log.info(
                f"Upload rejected for owner {owner_id}: {file_size} bytes exceeds "
                f"{max_file_size}"
            )
            raise FileTooLargeError(file_size, max_file_size)

        document_id = str(uuid.uuid4())
        locator = self._blob_store.put(
            owner_id, document_id, request.filename, request.data, request.content_type
        )
        document = self._register(request, document_id, locator, file_size)

        self._quota.increment(owner_id, ResourceKind.DOCUMENT_UPLOAD)
        self._broadcaster.publish(
            StageEvent(
                document_id=document.id,
                stage=EventStage.UPLOAD,
                progress=self._upload_weight,
                message="Upload complete, queued for processing",
            )
        )
        Log.info(f"Admitted document {document.id} for owner {owner_id} ({file_size} bytes)")
        return UploadReceipt(document=document, usage=usage)

    def get(self, owner_id: str, document_id: str) -> Document:
        return self._doc_repo.find_for_owner(document_id, owner_id)

    def delete(self, owner_id: str, document_id: str) -> None:
        """Remove a document's index entries, its row and finally its file."""
        document = self._doc_repo.find_for_owner(document_id, owner_id)
        self._index_repo.delete_for_document(document.id)
        self._doc_repo.delete(document.id)
        try:
            self._blob_store.delete(document.storage_locator)
        except StorageError as exc:
            Log.warning(f"Document {document.id} deleted but its file remains: {exc}")
        Log.info(f"Deleted document {document.id} for owner {owner_id}")

    def _register(
        self,
        request: UploadRequest,
        document_id: str,
        locator: str,
        file_size: int,
    ) -> Document:
        document: Document | None = None
        try:
            document = self._doc_repo.create(
                Document(
                    id=document_id,
                    owner_id=request.owner_id,
                    filename=request.filename,
                    content_type=request.content_type,
                    file_size=file_size,
                    storage_locator=locator,
                    pipeline_variant=request.variant,
                    document_type=request.document_type,
                    is_public=request.is_public,
                )
            )
            self._job_repo.enqueue(document.id)
        except Exception as exc:
            Log.error(f"Failed to register document {document_id}: {exc}")
            self._rollback(document, locator)
            raise StorageError(f"Failed to register document {document_id}: {exc}") from exc
        return document

    def _rollback(self, document: Document | None, locator: str) -> None:
        if document is not None:
            try:
                self._doc_repo.delete(document.id)
            except Exception as exc:
                Log.error(f"Rollback of document {document.id} failed: {exc}")
        try:
            self._blob_store.delete(locator)
        except StorageError as exc:
            Log.error(f"Rollback of blob {locator} failed: {exc}")
