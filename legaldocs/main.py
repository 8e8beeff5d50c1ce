from legaldocs.config.settings import Settings
from legaldocs.database.connection import close_pool, init_pool
from legaldocs.database.repositories.job_repository import JobRepository
from legaldocs.logging.logger import Log
from legaldocs.pipeline.builder import build_orchestrator
from legaldocs.worker.job_runner import JobRunner
from legaldocs.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> build pipeline -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        orchestrator = build_orchestrator(settings)
        job_repo = JobRepository()
        job_runner = JobRunner(orchestrator, job_repo)
        worker = Worker(job_repo, job_runner, settings)
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
