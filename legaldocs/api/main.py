import threading

import uvicorn

from legaldocs.api.app import create_app
from legaldocs.api.container import ServiceContainer, build_container
from legaldocs.config.settings import Settings
from legaldocs.database.connection import close_pool, init_pool
from legaldocs.database.repositories.job_repository import JobRepository
from legaldocs.logging.logger import Log
from legaldocs.pipeline.builder import build_orchestrator
from legaldocs.worker.job_runner import JobRunner
from legaldocs.worker.worker import Worker


def _start_embedded_worker(settings: Settings, container: ServiceContainer) -> Worker:
    """Run a worker in-process so the in-memory broadcaster reaches API subscribers."""
    orchestrator = build_orchestrator(
        settings,
        broadcaster=container.broadcaster,
        blob_store=container.blob_store,
        embedding_provider=container.embedding_provider,
    )
    job_repo = JobRepository()
    worker = Worker(job_repo, JobRunner(orchestrator, job_repo), settings)
    threading.Thread(target=worker.run, name="embedded-worker", daemon=True).start()
    return worker


def main() -> None:
    """Entry point: initialize pool -> wire services -> serve HTTP."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        container = build_container(settings)
        worker: Worker | None = None
        if settings.api_embedded_worker:
            worker = _start_embedded_worker(settings, container)
        elif settings.broadcaster_backend == "memory":
            Log.warning(
                "In-memory broadcaster without an embedded worker: "
                "progress events from separate worker processes will not reach this API"
            )
        try:
            uvicorn.run(create_app(container), host=settings.api_host, port=settings.api_port)
        finally:
            if worker is not None:
                worker.stop()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
