from abc import ABC, abstractmethod
from typing import ClassVar, Generic, TypeVar

from legaldocs.executors.exceptions import StageTimeoutError
from legaldocs.executors.models import ProgressReporter, no_progress
from legaldocs.utils.timeout import CallTimeoutError, call_with_timeout

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class StageExecutor(ABC, Generic[InputT, OutputT]):
    """One unit of pipeline work.

    Executors report progress as a fraction of their own share and raise
    ``StageError`` subclasses on failure. They never touch the database.
    """

    name: ClassVar[str]

    @abstractmethod
    def run(self, input_: InputT, progress: ProgressReporter = no_progress) -> OutputT:
        raise NotImplementedError


def run_with_timeout(
    executor: StageExecutor[InputT, OutputT],
    input_: InputT,
    progress: ProgressReporter,
    timeout_seconds: float,
) -> OutputT:
    """Run an executor, turning an overrun into ``StageTimeoutError``."""
    try:
        return call_with_timeout(lambda: executor.run(input_, progress), timeout_seconds)
    except CallTimeoutError as exc:
        raise StageTimeoutError(
            f"{executor.name} stage did not finish within {timeout_seconds:g}s"
        ) from exc
