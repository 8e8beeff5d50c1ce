import threading
import time

from legaldocs.config.settings import Settings
from legaldocs.database.connection import get_connection
from legaldocs.database.models import JobRecord
from legaldocs.database.repositories.job_repository import JobRepository
from legaldocs.logging.logger import Log
from legaldocs.worker.job_runner import JobRunner


class Worker:
    """Poll loop: claim -> dispatch -> wait when idle.

    Run several worker processes for concurrency; row locks keep their
    claims exclusive. ``stop()`` ends the loop from another thread, which is
    how the API shuts down its embedded worker.
    """

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings
        self._stop_event = threading.Event()
        self._next_sweep_at = 0.0

    def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs until stopped or interrupted, or until ``max_jobs`` jobs have run."""
        Log.info("Worker started, polling for jobs")
        jobs_done = 0
        try:
            while not self._stop_event.is_set():
                if max_jobs is not None and jobs_done >= max_jobs:
                    break
                job = self._try_claim_job()
                if job is None:
                    Log.debug("No jobs available, waiting")
                    self._sweep_stale_claims()
                    self._stop_event.wait(self._settings.job_poll_interval_seconds)
                    continue
                self._job_runner.run(job)
                jobs_done += 1
        except KeyboardInterrupt:
            Log.info("Worker interrupted")
        Log.info(f"Worker stopped after {jobs_done} job(s)")

    def stop(self) -> None:
        """Ask the loop to exit once the job in hand, if any, has finished."""
        self._stop_event.set()

    def _sweep_stale_claims(self) -> None:
        """Fail jobs left claimed by a dead worker. Runs at most once per sweep interval."""
        if self._settings.job_stale_after_seconds <= 0:
            return
        now = time.monotonic()
        if now < self._next_sweep_at:
            return
        self._next_sweep_at = now + self._settings.job_stale_sweep_interval_seconds
        try:
            document_ids = self._job_repo.fail_stale_jobs(self._settings.job_stale_after_seconds)
        except Exception as exc:
            Log.warning(f"Database error while sweeping stale jobs, will retry: {exc}")
            return
        for document_id in document_ids:
            Log.warning(f"Document {document_id} failed with timeout: its job claim expired")

    def _try_claim_job(self) -> JobRecord | None:
        """Attempt to claim the next pending job. Database errors mean "no job this round"."""
        try:
            with get_connection() as conn:
                return self._job_repo.claim_next_job(conn)
        except Exception as exc:
            Log.warning(f"Database error while claiming a job, will retry: {exc}")
            return None
