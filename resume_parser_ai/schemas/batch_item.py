"""One document's progress and outcome within a batch."""

from enum import Enum
from pathlib import PurePath
from typing import Optional

from pydantic import BaseModel, Field

from resume_parser_ai.schemas.resume_record import ResumeRecord


class BatchStatus(str, Enum):
    PENDING = "pending"
    PARSED = "parsed"
    FAILED = "failed"


class BatchItem(BaseModel):
    """Created pending; moves exactly once to parsed or failed."""

    document_id: str = Field(..., description="Stable document identity (the file path as given)")
    record: Optional[ResumeRecord] = Field(default=None, description="Extracted record once parsed")
    status: BatchStatus = Field(default=BatchStatus.PENDING, description="pending, parsed or failed")
    error: Optional[str] = Field(default=None, description="Failure reason when status is failed")

    @property
    def file_name(self) -> str:
        # Windows paths come from the uploader as-is, so split on both separators
        return PurePath(self.document_id.replace("\\", "/")).name

    def mark_parsed(self, record: ResumeRecord) -> None:
        self._check_pending()
        self.record = record
        self.status = BatchStatus.PARSED

    def mark_failed(self, error: str) -> None:
        self._check_pending()
        self.error = error
        self.status = BatchStatus.FAILED

    def _check_pending(self) -> None:
        if self.status is not BatchStatus.PENDING:
            raise RuntimeError(f"Batch item {self.document_id} already {self.status.value}")
