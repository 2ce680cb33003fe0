"""Agent exports."""

from .batch_agent import run_batch, stream_batch

__all__ = ["run_batch", "stream_batch"]
