import json
import time

from fastapi import APIRouter, Request
from sse_starlette.sse import EventSourceResponse, ServerSentEvent
from starlette.concurrency import run_in_threadpool

from legaldocs.api.dependencies import Container, OwnerId
from legaldocs.broadcasting.events import StageEvent
from legaldocs.logging.logger import Log
from legaldocs.pipeline.progress import snapshot_event

router = APIRouter(tags=["events"])

_POLL_SECONDS = 1.0


def _to_sse(event: StageEvent) -> ServerSentEvent:
    return ServerSentEvent(data=event.to_json(), event=event.stage.value)


def _end(document_id: str, reason: str) -> ServerSentEvent:
    return ServerSentEvent(
        data=json.dumps({"reason": reason, "document_id": document_id}),
        event="end",
    )


@router.get("/documents/{document_id}/events")
async def stream_progress(
    document_id: str,
    request: Request,
    container: Container,
    owner_id: OwnerId,
) -> EventSourceResponse:
    """Stream a document's stage events as server-sent events.

    The first event is a snapshot of the persisted state; live events follow
    until a ``completed`` or ``failed`` event, after which an ``end`` event
    closes the stream.
    """
    document = await run_in_threadpool(container.ingestion.get, owner_id, document_id)
    max_seconds = container.settings.api_stream_max_seconds

    async def event_generator():
        # Subscribe before reading the snapshot so nothing published in between is lost.
        subscription = container.broadcaster.subscribe(document_id)
        try:
            current = await run_in_threadpool(container.ingestion.get, owner_id, document_id)
            snapshot = snapshot_event(
                current, container.progress_policy(document.pipeline_variant)
            )
            yield _to_sse(snapshot)
            if snapshot.is_terminal:
                yield _end(document_id, snapshot.stage.value)
                return

            deadline = time.monotonic() + max_seconds
            while time.monotonic() < deadline:
                event = await run_in_threadpool(subscription.get, _POLL_SECONDS)
                if event is None:
                    if subscription.closed or await request.is_disconnected():
                        return
                    continue
                if event.progress < snapshot.progress and not event.is_terminal:
                    continue
                yield _to_sse(event)
                if event.is_terminal:
                    yield _end(document_id, event.stage.value)
                    return
            yield _end(document_id, "timeout")
        finally:
            subscription.close()
            Log.debug(f"Progress stream closed for document {document_id}")

    return EventSourceResponse(
        event_generator(),
        headers={"X-Accel-Buffering": "no", "Cache-Control": "no-cache"},
    )
