from legaldocs.executors.analysis import AnalysisExecutor
from legaldocs.executors.base import StageExecutor, run_with_timeout
from legaldocs.executors.embedding import EmbeddingExecutor
from legaldocs.executors.entities import EntityExtractionExecutor
from legaldocs.executors.exceptions import (
    EmptyInputError,
    ExtractionFailedError,
    InputTooLargeError,
    InternalStageError,
    ModelError,
    StageError,
    StageStorageError,
    StageTimeoutError,
    UnsupportedFormatError,
)
from legaldocs.executors.ocr import OcrExecutor

__all__ = [
    "AnalysisExecutor",
    "EmbeddingExecutor",
    "EmptyInputError",
    "EntityExtractionExecutor",
    "ExtractionFailedError",
    "InputTooLargeError",
    "InternalStageError",
    "ModelError",
    "OcrExecutor",
    "StageError",
    "StageExecutor",
    "StageStorageError",
    "StageTimeoutError",
    "UnsupportedFormatError",
    "run_with_timeout",
]
