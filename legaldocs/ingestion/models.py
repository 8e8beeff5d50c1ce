from dataclasses import dataclass

from legaldocs.documents.models import Document, PipelineVariant
from legaldocs.quota.models import UsageLimit


@dataclass(frozen=True)
class UploadRequest:
    owner_id: str
    filename: str
    content_type: str
    data: bytes
    document_type: str | None = None
    variant: PipelineVariant = PipelineVariant.FULL
    is_public: bool = False


@dataclass(frozen=True)
class UploadReceipt:
    """Admitted document plus the quota state at admission (``usage.warning`` flags 80%+)."""

    document: Document
    usage: UsageLimit
