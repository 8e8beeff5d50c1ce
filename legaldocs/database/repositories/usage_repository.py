from datetime import date

from psycopg.rows import dict_row

from legaldocs.database.connection import get_connection
from legaldocs.database.models import UsageRecord


class UsageRepository:
    """Database operations for usage_records plus the read-only profiles tier source."""

    def get_or_create(self, owner_id: str, resource_kind: str, period_start: date) -> UsageRecord:
        """Return the period's record, inserting a zero-valued row when absent."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO usage_records (owner_id, resource_kind, period_start, usage_count)
                    VALUES (%s, %s, %s, 0)
                    ON CONFLICT (owner_id, resource_kind, period_start) DO NOTHING
                    """,
                    (owner_id, resource_kind, period_start),
                )
                cur.execute(
                    """
                    SELECT owner_id, resource_kind, period_start, usage_count
                    FROM usage_records
                    WHERE owner_id = %s AND resource_kind = %s AND period_start = %s
                    """,
                    (owner_id, resource_kind, period_start),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            return UsageRecord(owner_id, resource_kind, period_start, 0)
        return UsageRecord(
            owner_id=row["owner_id"],
            resource_kind=row["resource_kind"],
            period_start=row["period_start"],
            usage_count=row["usage_count"],
        )

    def increment(
        self,
        owner_id: str,
        resource_kind: str,
        period_start: date,
        amount: int = 1,
    ) -> int:
        """Atomically add ``amount`` to the period's counter and return the new count.

        The addition happens inside a single upsert so concurrent uploads by
        the same owner never lose an update.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO usage_records (owner_id, resource_kind, period_start, usage_count)
                    VALUES (%s, %s, %s, %s)
                    ON CONFLICT (owner_id, resource_kind, period_start)
                    DO UPDATE SET usage_count = usage_records.usage_count + EXCLUDED.usage_count,
                                  updated_at = NOW()
                    RETURNING usage_count
                    """,
                    (owner_id, resource_kind, period_start, amount),
                )
                row = cur.fetchone()
            conn.commit()
        return int(row[0]) if row is not None else amount

    def counts_for_period(self, owner_id: str, period_start: date) -> dict[str, int]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT resource_kind, usage_count
                    FROM usage_records
                    WHERE owner_id = %s AND period_start = %s
                    """,
                    (owner_id, period_start),
                )
                rows = cur.fetchall()
        return {row["resource_kind"]: row["usage_count"] for row in rows}

    def get_tier(self, owner_id: str) -> str | None:
        """Read the owner's subscription tier. None when the owner has no profile."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT subscription_tier FROM profiles WHERE id = %s",
                    (owner_id,),
                )
                row = cur.fetchone()
        return row[0] if row is not None else None
