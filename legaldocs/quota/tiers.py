from legaldocs.logging.logger import Log
from legaldocs.quota.models import UNLIMITED, ResourceKind, TierLimits

_MB = 1024 * 1024

DEFAULT_TIER = "free"

TIER_LIMITS: dict[str, TierLimits] = {
    "free": TierLimits(
        name="free",
        max_file_size=10 * _MB,
        monthly={
            ResourceKind.DOCUMENT_UPLOAD: 1,
            ResourceKind.AI_QUERY: 10,
            ResourceKind.DOCUMENT_DOWNLOAD: 1,
            ResourceKind.CUSTOM_DOCUMENT: 0,
        },
    ),
    "premium": TierLimits(
        name="premium",
        max_file_size=50 * _MB,
        monthly={
            ResourceKind.DOCUMENT_UPLOAD: 10,
            ResourceKind.AI_QUERY: 50,
            ResourceKind.DOCUMENT_DOWNLOAD: 10,
            ResourceKind.CUSTOM_DOCUMENT: 3,
        },
    ),
    "pro": TierLimits(
        name="pro",
        max_file_size=100 * _MB,
        monthly={
            ResourceKind.DOCUMENT_UPLOAD: 20,
            ResourceKind.AI_QUERY: 500,
            ResourceKind.DOCUMENT_DOWNLOAD: UNLIMITED,
            ResourceKind.CUSTOM_DOCUMENT: 20,
        },
    ),
    "enterprise": TierLimits(
        name="enterprise",
        max_file_size=500 * _MB,
        monthly={
            ResourceKind.DOCUMENT_UPLOAD: UNLIMITED,
            ResourceKind.AI_QUERY: UNLIMITED,
            ResourceKind.DOCUMENT_DOWNLOAD: UNLIMITED,
            ResourceKind.CUSTOM_DOCUMENT: UNLIMITED,
        },
    ),
}


def resolve_tier(tier: str | None) -> TierLimits:
    """Look up a tier's limits, falling back to the free tier for unknown names."""
    if tier is None:
        return TIER_LIMITS[DEFAULT_TIER]
    limits = TIER_LIMITS.get(tier.lower())
    if limits is None:
        Log.warning(f"Unknown subscription tier '{tier}', using '{DEFAULT_TIER}' limits")
        return TIER_LIMITS[DEFAULT_TIER]
    return limits
