import queue
import threading
from typing import cast

from legaldocs.broadcasting.base import BaseBroadcaster, Subscription
from legaldocs.broadcasting.events import StageEvent
from legaldocs.logging.logger import Log

_CLOSED = object()


class _MemorySubscription(Subscription):
    def __init__(self, document_id: str, broadcaster: "InMemoryBroadcaster", max_pending: int) -> None:
        super().__init__(document_id)
        self._broadcaster = broadcaster
        self._queue: queue.Queue[object] = queue.Queue(maxsize=max_pending)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, timeout: float | None = None) -> StageEvent | None:
        if self._closed and self._queue.empty():
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSED:
            return None
        return cast(StageEvent, item)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._broadcaster._remove(self)
        try:
            self._queue.put_nowait(_CLOSED)
        except queue.Full:
            pass

    def _offer(self, event: StageEvent) -> bool:
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            return False
        return True


class InMemoryBroadcaster(BaseBroadcaster):
    """Process-local broadcaster for a single API + worker process.

    Events are enqueued while holding the lock, so concurrent publishers for
    the same document cannot interleave differently for different
    subscribers. A subscriber whose queue is full misses the event.
    """

    def __init__(self, max_pending: int = 1000) -> None:
        self._max_pending = max_pending
        self._lock = threading.Lock()
        self._subscribers: dict[str, list[_MemorySubscription]] = {}

    def publish(self, event: StageEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers.get(event.document_id, ()))
            for subscription in subscribers:
                if not subscription._offer(event):
                    Log.warning(
                        f"Dropped {event.stage.value} event for document "
                        f"{event.document_id}: subscriber queue full"
                    )

    def subscribe(self, document_id: str) -> Subscription:
        subscription = _MemorySubscription(document_id, self, self._max_pending)
        with self._lock:
            self._subscribers.setdefault(document_id, []).append(subscription)
        return subscription

    def subscriber_count(self, document_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(document_id, ()))

    def _remove(self, subscription: _MemorySubscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.document_id)
            if not subscribers:
                return
            if subscription in subscribers:
                subscribers.remove(subscription)
            if not subscribers:
                del self._subscribers[subscription.document_id]
