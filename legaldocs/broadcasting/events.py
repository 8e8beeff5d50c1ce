import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class EventStage(str, Enum):
    UPLOAD = "upload"
    OCR = "ocr"
    ANALYSIS = "analysis"
    EMBEDDING = "embedding"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class StageEvent:
    """Ephemeral progress notification for one document.

    Never persisted; the document row is the source of truth for anyone who
    missed an event.
    """

    document_id: str
    stage: EventStage
    progress: float
    message: str | None = None
    error: str | None = None
    error_code: str | None = None
    emitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_terminal(self) -> bool:
        return self.stage in (EventStage.COMPLETED, EventStage.FAILED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "document_id": self.document_id,
            "stage": self.stage.value,
            "progress": self.progress,
            "message": self.message,
            "error": self.error,
            "error_code": self.error_code,
            "emitted_at": self.emitted_at.isoformat(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StageEvent":
        return cls(
            document_id=str(data["document_id"]),
            stage=EventStage(data["stage"]),
            progress=float(data["progress"]),
            message=data.get("message"),
            error=data.get("error"),
            error_code=data.get("error_code"),
            emitted_at=datetime.fromisoformat(data["emitted_at"]),
        )

    @classmethod
    def from_json(cls, raw: str | bytes) -> "StageEvent":
        return cls.from_dict(json.loads(raw))
