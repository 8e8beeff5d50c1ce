from typing import Any

import psycopg
from psycopg.rows import dict_row

from legaldocs.database.connection import get_connection
from legaldocs.database.models import JobRecord


def _to_job(row: dict[str, Any]) -> JobRecord:
    return JobRecord(
        id=row["id"],
        document_id=str(row["document_id"]),
        status=row["status"],
        error_message=row.get("error_message"),
        locked_at=row.get("locked_at"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class JobRepository:
    """Database operations for the processing_jobs table."""

    def enqueue(self, document_id: str) -> JobRecord:
        """Queue a document for background processing."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO processing_jobs (document_id, status)
                    VALUES (%s::uuid, 'pending')
                    RETURNING id, document_id, status, created_at, updated_at
                    """,
                    (document_id,),
                )
                row = cur.fetchone()
            conn.commit()
        if row is None:
            raise RuntimeError(f"Failed to enqueue job for document {document_id}")
        return _to_job(row)

    def claim_next_job(self, conn: psycopg.Connection[Any]) -> JobRecord | None:
        """Claim the oldest pending job using SELECT FOR UPDATE SKIP LOCKED.

        Several worker processes can poll the same table; a locked row is
        skipped, so every job is handed to exactly one worker.
        """
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT id, document_id, status
                FROM processing_jobs
                WHERE status = 'pending'
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """
            )
            row = cur.fetchone()

        if row is None:
            conn.commit()
            return None

        conn.execute(
            """
            UPDATE processing_jobs
            SET status = 'processing', locked_at = NOW(), updated_at = NOW()
            WHERE id = %s
            """,
            (row["id"],),
        )
        conn.commit()

        return JobRecord(
            id=row["id"],
            document_id=str(row["document_id"]),
            status="processing",
        )

    def mark_done(self, job_id: int) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE processing_jobs
                SET status = 'done', updated_at = NOW()
                WHERE id = %s AND status = 'processing'
                """,
                (job_id,),
            )
            conn.commit()

    def mark_failed(self, job_id: int, error: str) -> None:
        """Mark a claimed job as failed. Jobs are never retried automatically."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE processing_jobs
                SET status = 'failed', error_message = %s, updated_at = NOW()
                WHERE id = %s AND status = 'processing'
                """,
                (error, job_id),
            )
            conn.commit()

    def find_by_id(self, job_id: int) -> JobRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, document_id, status, error_message,
                           locked_at, created_at, updated_at
                    FROM processing_jobs
                    WHERE id = %s
                    """,
                    (job_id,),
                )
                row = cur.fetchone()
        return _to_job(row) if row is not None else None

    def fail_stale_jobs(self, older_than_seconds: float) -> list[str]:
        """Fail jobs whose claim is older than ``older_than_seconds`` and their documents.

        A worker that dies mid-job leaves its claim in ``processing`` forever;
        this releases such claims so the document reports ``timeout`` instead
        of spinning. A live worker that finishes after the sweep has its late
        writes rejected by the document state check. Returns the ids of the
        documents moved to failed.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    WITH stale AS (
                        UPDATE processing_jobs
                        SET status = 'failed',
                            error_message = 'Claim expired before the job finished',
                            updated_at = NOW()
                        WHERE status = 'processing'
                          AND locked_at < NOW() - make_interval(secs => %s)
                        RETURNING document_id
                    )
                    UPDATE documents
                    SET processing_status = 'failed',
                        processing_stage = COALESCE(documents.processing_stage, 'ocr'),
                        failed_stage = COALESCE(documents.processing_stage, 'ocr'),
                        error_code = 'timeout',
                        error_message = 'Processing did not finish in time',
                        updated_at = NOW()
                    FROM stale
                    WHERE documents.id = stale.document_id
                      AND documents.processing_status IN ('pending', 'processing')
                    RETURNING documents.id
                    """,
                    (older_than_seconds,),
                )
                rows = cur.fetchall()
            conn.commit()
        return [str(row["id"]) for row in rows]
