from dataclasses import dataclass, field
from enum import Enum

UNLIMITED = -1


class ResourceKind(str, Enum):
    DOCUMENT_UPLOAD = "document_upload"
    AI_QUERY = "ai_query"
    DOCUMENT_DOWNLOAD = "document_download"
    CUSTOM_DOCUMENT = "custom_document"


@dataclass(frozen=True)
class TierLimits:
    """Monthly allowances for one subscription tier. ``UNLIMITED`` (-1) means no cap."""

    name: str
    max_file_size: int
    monthly: dict[ResourceKind, int] = field(default_factory=dict)

    def limit_for(self, resource_kind: ResourceKind) -> int:
        return self.monthly.get(resource_kind, UNLIMITED)


@dataclass(frozen=True)
class UsageLimit:
    """Answer to an admission query.

    ``warning`` is set once usage crosses the warning threshold; ``degraded``
    marks an answer produced without reaching the ledger (fail-open).
    ``max_file_size`` is the tier's upload ceiling in bytes, read in the same
    lookup so admission needs no second round trip.
    """

    allowed: bool
    limit: int
    current: int
    remaining: int
    percentage: float
    tier: str
    warning: bool = False
    degraded: bool = False
    max_file_size: int | None = None
