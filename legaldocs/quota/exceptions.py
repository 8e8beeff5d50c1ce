from legaldocs.quota.models import UsageLimit


class QuotaError(Exception):
    """Base exception for quota errors."""


class QuotaExceededError(QuotaError):
    """Raised at admission when the owner has used up the period's allowance."""

    def __init__(self, resource_kind: str, usage: UsageLimit) -> None:
        self.resource_kind = resource_kind
        self.usage = usage
        super().__init__(
            f"Monthly {resource_kind} limit reached "
            f"({usage.current}/{usage.limit} on tier {usage.tier})"
        )
