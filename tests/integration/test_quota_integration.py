from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import pytest

from legaldocs.database.repositories.usage_repository import UsageRepository
from legaldocs.quota.ledger import QuotaLedger, current_period_start
from legaldocs.quota.models import ResourceKind


@pytest.mark.integration
class TestUsageRepository:
    def test_get_or_create_starts_at_zero(self, owner_id: str) -> None:
        record = UsageRepository().get_or_create(
            owner_id, "document_upload", current_period_start()
        )
        assert record.usage_count == 0

    def test_concurrent_increments_are_not_lost(self, owner_id: str) -> None:
        repo = UsageRepository()
        period = current_period_start()

        with ThreadPoolExecutor(max_workers=5) as pool:
            list(pool.map(lambda _: repo.increment(owner_id, "ai_query", period), range(20)))

        assert repo.counts_for_period(owner_id, period) == {"ai_query": 20}

    def test_missing_profile_has_no_tier(self, owner_id: str) -> None:
        assert UsageRepository().get_tier(owner_id) is None


@pytest.mark.integration
class TestQuotaLedger:
    def test_free_tier_allows_one_upload(self, owner_id: str) -> None:
        ledger = QuotaLedger(UsageRepository())

        first = ledger.check_limit(owner_id, ResourceKind.DOCUMENT_UPLOAD)
        ledger.increment(owner_id, ResourceKind.DOCUMENT_UPLOAD)
        second = ledger.check_limit(owner_id, ResourceKind.DOCUMENT_UPLOAD)

        assert (first.allowed, first.tier, first.limit) == (True, "free", 1)
        assert (second.allowed, second.current) == (False, 1)

    def test_tier_comes_from_profile(
        self, owner_id: str, seed_profile: Callable[[str], None]
    ) -> None:
        seed_profile("premium")
        ledger = QuotaLedger(UsageRepository())

        usage = ledger.check_limit(owner_id, ResourceKind.DOCUMENT_UPLOAD)

        assert (usage.tier, usage.limit) == ("premium", 10)
        assert ledger.max_file_size(owner_id) == 50 * 1024 * 1024

    def test_usage_stats(self, owner_id: str) -> None:
        ledger = QuotaLedger(UsageRepository())
        ledger.increment(owner_id, ResourceKind.AI_QUERY, amount=3)

        stats = ledger.usage_stats(owner_id)

        assert stats[ResourceKind.AI_QUERY] == 3
        assert stats[ResourceKind.DOCUMENT_UPLOAD] == 0
