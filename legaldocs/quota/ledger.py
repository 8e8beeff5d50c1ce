from datetime import date, datetime, timezone
from typing import Protocol

from legaldocs.database.repositories.usage_repository import UsageRepository
from legaldocs.logging.logger import Log
from legaldocs.quota.models import UNLIMITED, ResourceKind, TierLimits, UsageLimit
from legaldocs.quota.tiers import DEFAULT_TIER, TIER_LIMITS, resolve_tier
from legaldocs.utils.timeout import CallTimeoutError, call_with_timeout


class TierSource(Protocol):
    def get_tier(self, owner_id: str) -> str | None: ...


def current_period_start(now: datetime | None = None) -> date:
    """First day of the current calendar month in UTC."""
    moment = now or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).date().replace(day=1)


class QuotaLedger:
    """Per-owner monthly usage accounting and admission checks.

    Admission checks fail open: if the ledger cannot answer within
    ``timeout_seconds`` the upload is allowed and a warning is logged.
    Increments are best-effort and never raise.
    """

    def __init__(
        self,
        usage_repo: UsageRepository,
        tier_source: TierSource | None = None,
        *,
        timeout_seconds: float = 5.0,
        warning_percentage: float = 80.0,
    ) -> None:
        self._usage_repo = usage_repo
        self._tier_source = tier_source or usage_repo
        self._timeout_seconds = timeout_seconds
        self._warning_percentage = warning_percentage

    def check_limit(self, owner_id: str, resource_kind: ResourceKind) -> UsageLimit:
        try:
            return call_with_timeout(
                lambda: self._evaluate(owner_id, resource_kind),
                self._timeout_seconds,
            )
        except CallTimeoutError:
            Log.warning(
                f"Quota check for owner {owner_id} timed out after "
                f"{self._timeout_seconds:g}s, admitting {resource_kind.value}"
            )
        except Exception as exc:
            Log.warning(
                f"Quota check for owner {owner_id} failed, admitting "
                f"{resource_kind.value}: {exc}"
            )
        return UsageLimit(
            allowed=True,
            limit=UNLIMITED,
            current=0,
            remaining=UNLIMITED,
            percentage=0.0,
            tier="unknown",
            degraded=True,
            max_file_size=TIER_LIMITS[DEFAULT_TIER].max_file_size,
        )

    def max_file_size(self, owner_id: str) -> int:
        """Size ceiling in bytes for the owner's tier.

        Falls back to the free ceiling when the tier is unreadable or slow.
        """
        try:
            return call_with_timeout(
                lambda: self._tier_limits(owner_id).max_file_size,
                self._timeout_seconds,
            )
        except Exception as exc:
            Log.warning(f"Tier lookup for owner {owner_id} failed, using free tier ceiling: {exc}")
            return TIER_LIMITS[DEFAULT_TIER].max_file_size

    def increment(self, owner_id: str, resource_kind: ResourceKind, amount: int = 1) -> None:
        """Record consumption after the gated action has durably started."""
        try:
            count = self._usage_repo.increment(
                owner_id, resource_kind.value, current_period_start(), amount
            )
        except Exception as exc:
            Log.warning(
                f"Failed to record {resource_kind.value} usage for owner {owner_id}: {exc}"
            )
            return
        Log.debug(f"Usage for owner {owner_id}: {resource_kind.value}={count}")

    def usage_stats(self, owner_id: str) -> dict[ResourceKind, int]:
        counts = self._usage_repo.counts_for_period(owner_id, current_period_start())
        return {kind: counts.get(kind.value, 0) for kind in ResourceKind}

    def _tier_limits(self, owner_id: str) -> TierLimits:
        return resolve_tier(self._tier_source.get_tier(owner_id))

    def _evaluate(self, owner_id: str, resource_kind: ResourceKind) -> UsageLimit:
        tier = self._tier_limits(owner_id)
        record = self._usage_repo.get_or_create(
            owner_id, resource_kind.value, current_period_start()
        )
        limit = tier.limit_for(resource_kind)
        current = record.usage_count

        if limit == UNLIMITED:
            return UsageLimit(
                allowed=True,
                limit=UNLIMITED,
                current=current,
                remaining=UNLIMITED,
                percentage=0.0,
                tier=tier.name,
                max_file_size=tier.max_file_size,
            )

        percentage = 100.0 if limit == 0 else current / limit * 100
        allowed = percentage < 100
        warning = percentage >= self._warning_percentage
        if warning:
            Log.warning(
                f"Owner {owner_id} has used {percentage:.0f}% of monthly "
                f"{resource_kind.value} allowance ({current}/{limit})"
            )
        return UsageLimit(
            allowed=allowed,
            limit=limit,
            current=current,
            remaining=max(limit - current, 0),
            percentage=percentage,
            tier=tier.name,
            warning=warning,
            max_file_size=tier.max_file_size,
        )
