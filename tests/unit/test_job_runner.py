from unittest.mock import MagicMock

from legaldocs.database.models import JobRecord
from legaldocs.database.repositories.job_repository import JobRepository
from legaldocs.documents.models import ProcessingStatus
from legaldocs.pipeline.orchestrator import PipelineOrchestrator
from legaldocs.worker.job_runner import JobRunner


def _make_runner() -> tuple[JobRunner, MagicMock, MagicMock]:
    """Create a JobRunner with mocked dependencies."""
    mock_orchestrator = MagicMock(spec=PipelineOrchestrator)
    mock_repo = MagicMock(spec=JobRepository)
    runner = JobRunner(mock_orchestrator, mock_repo)
    return runner, mock_orchestrator, mock_repo


def _make_job() -> JobRecord:
    return JobRecord(id=1, document_id="doc-10", status="processing")


class TestSuccessfulProcessing:
    def test_calls_orchestrator(self) -> None:
        runner, mock_orchestrator, _repo = _make_runner()
        mock_orchestrator.process.return_value = ProcessingStatus.COMPLETED

        runner.run(_make_job())

        mock_orchestrator.process.assert_called_once_with("doc-10")

    def test_marks_job_done(self) -> None:
        runner, mock_orchestrator, mock_repo = _make_runner()
        mock_orchestrator.process.return_value = ProcessingStatus.COMPLETED

        runner.run(_make_job())

        mock_repo.mark_done.assert_called_once_with(1)
        mock_repo.mark_failed.assert_not_called()


class TestDocumentOutcomes:
    def test_failed_document_still_completes_job(self) -> None:
        runner, mock_orchestrator, mock_repo = _make_runner()
        mock_orchestrator.process.return_value = ProcessingStatus.FAILED

        runner.run(_make_job())

        mock_repo.mark_done.assert_called_once_with(1)

    def test_unclaimed_document_completes_job(self) -> None:
        runner, mock_orchestrator, mock_repo = _make_runner()
        mock_orchestrator.process.return_value = None

        runner.run(_make_job())

        mock_repo.mark_done.assert_called_once_with(1)


class TestUnexpectedFailure:
    def test_marks_failed_without_retry(self) -> None:
        runner, mock_orchestrator, mock_repo = _make_runner()
        mock_orchestrator.process.side_effect = Exception("boom")

        runner.run(_make_job())

        mock_repo.mark_failed.assert_called_once_with(1, "boom")
        mock_repo.mark_done.assert_not_called()
        assert mock_orchestrator.process.call_count == 1
