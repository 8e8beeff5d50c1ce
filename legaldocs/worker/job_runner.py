from legaldocs.database.models import JobRecord
from legaldocs.database.repositories.job_repository import JobRepository
from legaldocs.documents.models import ProcessingStatus
from legaldocs.logging.logger import Log
from legaldocs.pipeline.orchestrator import PipelineOrchestrator


class JobRunner:
    """Run one job through the orchestrator and record the job's outcome.

    Document failures are recorded on the document by the orchestrator; the
    job is still done. Only an exception escaping the orchestrator marks the
    job failed. Jobs are never retried.
    """

    def __init__(self, orchestrator: PipelineOrchestrator, job_repo: JobRepository) -> None:
        self._orchestrator = orchestrator
        self._job_repo = job_repo

    def run(self, job: JobRecord) -> None:
        Log.info(f"Running job {job.id} for document {job.document_id}")
        try:
            status = self._orchestrator.process(job.document_id)
        except Exception as exc:
            Log.error(f"Job {job.id} failed: {exc}")
            self._job_repo.mark_failed(job.id, str(exc))
            return

        self._job_repo.mark_done(job.id)
        if status is None:
            Log.info(f"Job {job.id}: document {job.document_id} was not pending")
        elif status is ProcessingStatus.FAILED:
            Log.warning(f"Job {job.id}: document {job.document_id} ended in failed state")
        else:
            Log.info(f"Job {job.id} completed successfully")
