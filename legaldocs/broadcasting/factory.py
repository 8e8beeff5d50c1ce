from legaldocs.broadcasting.base import BaseBroadcaster
from legaldocs.broadcasting.memory_broadcaster import InMemoryBroadcaster
from legaldocs.broadcasting.redis_broadcaster import RedisBroadcaster
from legaldocs.config.settings import Settings


class BroadcasterFactory:
    """Creates the configured broadcaster backend."""

    @classmethod
    def create(cls, settings: Settings) -> BaseBroadcaster:
        if settings.broadcaster_backend == "redis":
            return RedisBroadcaster.from_url(settings.redis_url)
        return InMemoryBroadcaster()
