"""Schema exports."""

from .batch_item import BatchItem, BatchStatus
from .resume_record import RECORD_FIELDS, ResumeRecord

__all__ = ["BatchItem", "BatchStatus", "ResumeRecord", "RECORD_FIELDS"]
