"""Redis pub/sub transport for stage events.

Channel naming: ``document:progress:<document_id>``. Messages are the JSON
form of ``StageEvent``.
"""

import time
from typing import Any

import redis

from legaldocs.broadcasting.base import BaseBroadcaster, Subscription
from legaldocs.broadcasting.events import StageEvent
from legaldocs.logging.logger import Log


def document_channel(document_id: str) -> str:
    return f"document:progress:{document_id}"


class _RedisSubscription(Subscription):
    def __init__(self, document_id: str, pubsub: Any) -> None:
        super().__init__(document_id)
        self._pubsub = pubsub
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, timeout: float | None = None) -> StageEvent | None:
        deadline = None if timeout is None else time.monotonic() + timeout
        while not self._closed:
            remaining = 1.0 if deadline is None else max(0.0, deadline - time.monotonic())
            message = self._pubsub.get_message(
                ignore_subscribe_messages=True, timeout=remaining
            )
            if message is not None and message.get("type") == "message":
                try:
                    return StageEvent.from_json(message["data"])
                except (ValueError, KeyError, TypeError) as exc:
                    Log.warning(
                        f"Ignoring malformed event on {document_channel(self.document_id)}: {exc}"
                    )
            if deadline is not None and time.monotonic() >= deadline:
                return None
        return None

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._pubsub.unsubscribe()
            self._pubsub.close()
        except redis.RedisError as exc:
            Log.warning(f"Error closing subscription for document {self.document_id}: {exc}")


class RedisBroadcaster(BaseBroadcaster):
    """Broadcaster shared by API and worker processes through Redis."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisBroadcaster":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def publish(self, event: StageEvent) -> None:
        channel = document_channel(event.document_id)
        try:
            receivers = self._client.publish(channel, event.to_json())
        except Exception as exc:
            Log.warning(f"Redis publish to {channel} failed: {exc}")
            return
        Log.debug(f"Published {event.stage.value} event to {channel} ({receivers} receivers)")

    def subscribe(self, document_id: str) -> Subscription:
        pubsub = self._client.pubsub()
        pubsub.subscribe(document_channel(document_id))
        return _RedisSubscription(document_id, pubsub)
