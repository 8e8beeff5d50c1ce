"""Weighted overall progress for a document's pipeline.

Overall progress is ``upload_weight`` plus, for each configured stage, its
weight times the fraction of that stage completed. Stage weights are
rescaled so the configured stages always share ``100 - upload_weight``;
with the defaults a full pipeline runs upload 20, OCR 30, analysis 30,
embedding 20, and a basic pipeline runs upload 20, OCR 40, analysis 40.
"""

import threading
from collections.abc import Mapping

from legaldocs.broadcasting.base import BaseBroadcaster
from legaldocs.broadcasting.events import EventStage, StageEvent
from legaldocs.documents.models import (
    Document,
    PipelineVariant,
    ProcessingStage,
    ProcessingStatus,
)
from legaldocs.executors.models import ProgressReporter

DEFAULT_STAGE_WEIGHTS: dict[ProcessingStage, float] = {
    ProcessingStage.OCR: 30.0,
    ProcessingStage.ANALYSIS: 30.0,
    ProcessingStage.EMBEDDING: 20.0,
}


class ProgressPolicy:
    def __init__(
        self,
        stages: tuple[ProcessingStage, ...],
        upload_weight: float = 20.0,
        stage_weights: Mapping[ProcessingStage, float] | None = None,
    ) -> None:
        if not 0 <= upload_weight < 100:
            raise ValueError("upload_weight must be within [0, 100)")
        weights = stage_weights or DEFAULT_STAGE_WEIGHTS
        raw = {stage: float(weights.get(stage, 0.0)) for stage in stages}
        if any(weight < 0 for weight in raw.values()):
            raise ValueError("Stage weights must not be negative")
        total = sum(raw.values())
        remaining = 100.0 - upload_weight
        if total == 0:
            scaled = {stage: remaining / len(stages) for stage in stages} if stages else {}
        else:
            scaled = {stage: weight * remaining / total for stage, weight in raw.items()}

        self.upload_weight = float(upload_weight)
        self.stages = stages
        self.stage_weights = scaled
        self._offsets: dict[ProcessingStage, float] = {}
        offset = self.upload_weight
        for stage in stages:
            self._offsets[stage] = offset
            offset += scaled[stage]

    @classmethod
    def for_variant(
        cls,
        variant: PipelineVariant,
        upload_weight: float = 20.0,
        stage_weights: Mapping[ProcessingStage, float] | None = None,
    ) -> "ProgressPolicy":
        return cls(variant.stages, upload_weight, stage_weights)

    def overall(self, stage: ProcessingStage, fraction: float) -> float:
        """Overall percentage after completing ``fraction`` of ``stage``."""
        if stage not in self._offsets:
            raise ValueError(f"Stage {stage.value} is not part of this pipeline")
        fraction = max(0.0, min(1.0, fraction))
        return self._offsets[stage] + self.stage_weights[stage] * fraction


class ProgressTracker:
    """Publishes one document's stage events with non-decreasing progress.

    Reports arriving after the terminal event (for example from an executor
    that overran its timeout) are dropped.
    """

    def __init__(
        self,
        document_id: str,
        policy: ProgressPolicy,
        broadcaster: BaseBroadcaster,
    ) -> None:
        self._document_id = document_id
        self._policy = policy
        self._broadcaster = broadcaster
        self._lock = threading.Lock()
        self._last = policy.upload_weight
        self._finished = False

    @property
    def last_progress(self) -> float:
        return self._last

    @property
    def finished(self) -> bool:
        return self._finished

    def reporter(
        self,
        stage: ProcessingStage,
        start: float = 0.0,
        end: float = 1.0,
    ) -> ProgressReporter:
        """Reporter for ``stage`` mapping an executor's [0, 1] onto [start, end] of the stage."""

        def report(fraction: float, message: str | None = None) -> None:
            local = start + (end - start) * max(0.0, min(1.0, fraction))
            self._emit(EventStage(stage.value), self._policy.overall(stage, local), message)

        return report

    def complete(self, message: str | None = "Processing complete") -> None:
        self._emit(EventStage.COMPLETED, 100.0, message, terminal=True)

    def fail(self, error: str, error_code: str, message: str | None = None) -> None:
        self._emit(
            EventStage.FAILED,
            self._last,
            message,
            error=error,
            error_code=error_code,
            terminal=True,
        )

    def _emit(
        self,
        stage: EventStage,
        progress: float,
        message: str | None,
        *,
        error: str | None = None,
        error_code: str | None = None,
        terminal: bool = False,
    ) -> None:
        with self._lock:
            if self._finished:
                return
            self._last = max(self._last, min(progress, 100.0))
            if terminal:
                self._finished = True
            event = StageEvent(
                document_id=self._document_id,
                stage=stage,
                progress=round(self._last, 2),
                message=message,
                error=error,
                error_code=error_code,
            )
            self._broadcaster.publish(event)


def snapshot_event(document: Document, policy: ProgressPolicy) -> StageEvent:
    """Best estimate of a document's progress from its persisted row.

    Used to prime late subscribers, which never see events published
    before they subscribed.
    """
    status = document.processing_status
    if status is ProcessingStatus.COMPLETED:
        return StageEvent(document.id, EventStage.COMPLETED, 100.0, "Processing complete")
    if status is ProcessingStatus.FAILED:
        stage = document.failed_stage
        progress = policy.overall(stage, 0.0) if stage in policy.stages else policy.upload_weight
        return StageEvent(
            document.id,
            EventStage.FAILED,
            round(progress, 2),
            error=document.error_message,
            error_code=document.error_code,
        )
    if status is ProcessingStatus.PROCESSING and document.processing_stage in policy.stages:
        stage = document.processing_stage
        return StageEvent(
            document.id,
            EventStage(stage.value),
            round(policy.overall(stage, 0.0), 2),
        )
    return StageEvent(document.id, EventStage.UPLOAD, policy.upload_weight, "Queued")
