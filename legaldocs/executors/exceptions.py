from typing import ClassVar


class StageError(Exception):
    """Base class for failures that end a document's pipeline.

    ``code`` is a stable identifier persisted on the document and sent to
    observers; the message is human-readable.
    """

    code: ClassVar[str] = "stage_error"


class UnsupportedFormatError(StageError):
    code = "unsupported_format"


class ExtractionFailedError(StageError):
    code = "extraction_failed"


class ModelError(StageError):
    """The AI or embedding provider failed or returned non-conforming output."""

    code = "model_error"


class EmptyInputError(StageError):
    code = "empty_input"


class InputTooLargeError(StageError):
    code = "input_too_large"


class StageTimeoutError(StageError):
    code = "timeout"


class StageStorageError(StageError):
    code = "storage_error"


class InternalStageError(StageError):
    """Wraps an unexpected exception so it is recorded like any other stage failure."""

    code = "internal_error"
