"""
Exceptions raised by the resume parsing pipeline.

Per-document errors (DocumentExtractionError, InferenceError) are caught by the
batch agent and recorded on the failed item. Setup errors (ModelNotFoundError,
ModelLoadError, BatchSizeError) propagate to the caller before any document
is processed.
"""

from typing import Any, Optional


class ResumeParserError(Exception):
    """Base exception for all resume parser errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class DocumentExtractionError(ResumeParserError, OSError):
    """The file was read but its format library could not decode it."""


class ModelNotFoundError(ResumeParserError):
    """The model artifact is not where the user was told to put it."""

    def __init__(self, model_path: str, hint: Optional[str] = None) -> None:
        message = hint or f"模型文件不存在，请将模型文件放到: {model_path}"
        super().__init__(message)
        self.model_path = model_path

    def __str__(self) -> str:
        return self.message


class ModelLoadError(ResumeParserError):
    """The model artifact exists but could not be loaded."""


class InferenceError(ResumeParserError):
    """A single completion call failed."""


class InferenceTimeoutError(InferenceError):
    """A single completion call did not finish in time."""


class BatchSizeError(ResumeParserError, ValueError):
    """More documents than the configured batch cap."""

    def __init__(self, size: int, max_size: int) -> None:
        super().__init__(
            f"一次最多解析 {max_size} 个文件，本次 {size} 个",
            {"size": size, "max_size": max_size},
        )
