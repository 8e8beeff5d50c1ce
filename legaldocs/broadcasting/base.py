from abc import ABC, abstractmethod
from collections.abc import Iterator
from types import TracebackType

from legaldocs.broadcasting.events import StageEvent


class Subscription(ABC):
    """A subscriber's view of one document's event stream.

    Iterating blocks for each event and stops after a terminal event or
    once the subscription is closed.
    """

    def __init__(self, document_id: str) -> None:
        self.document_id = document_id

    @abstractmethod
    def get(self, timeout: float | None = None) -> StageEvent | None:
        """Next event, or None if none arrived within ``timeout`` or the subscription is closed."""

    @abstractmethod
    def close(self) -> None: ...

    @property
    @abstractmethod
    def closed(self) -> bool: ...

    def __iter__(self) -> Iterator[StageEvent]:
        while not self.closed:
            event = self.get(timeout=1.0)
            if event is None:
                continue
            yield event
            if event.is_terminal:
                return

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class BaseBroadcaster(ABC):
    """Best-effort fan-out of stage events, keyed by document id.

    Every subscriber of a document receives every event published after it
    subscribed, in publish order. There is no replay.
    """

    @abstractmethod
    def publish(self, event: StageEvent) -> None:
        """Deliver ``event`` to current subscribers. Never raises."""

    @abstractmethod
    def subscribe(self, document_id: str) -> Subscription: ...
