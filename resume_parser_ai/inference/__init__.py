"""Local model backends and the serialized inference session."""

from resume_parser_ai.inference.backends import (
    InferenceBackend,
    LlamaCppBackend,
    OpenAICompatibleBackend,
    get_inference_backend,
)
from resume_parser_ai.inference.session import (
    InferenceSessionManager,
    SessionState,
    get_session_manager,
)

__all__ = [
    "InferenceBackend",
    "LlamaCppBackend",
    "OpenAICompatibleBackend",
    "get_inference_backend",
    "InferenceSessionManager",
    "SessionState",
    "get_session_manager",
]
