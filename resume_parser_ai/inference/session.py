"""
Inference session: one loaded model plus one conversational history.

The manager owns the backend, loads it lazily exactly once, and serializes
turns so that a document's reset + prompt can never interleave with another
document's. The history is cleared before each document so nothing leaks
between resumes.
"""

import asyncio
import threading
from enum import Enum
from typing import List, Optional

from resume_parser_ai.config import INFERENCE_TIMEOUT_SECONDS
from resume_parser_ai.cv_pipeline.prompt_builder import SYSTEM_PROMPT
from resume_parser_ai.errors import (
    InferenceError,
    InferenceTimeoutError,
    ModelLoadError,
    ModelNotFoundError,
)
from resume_parser_ai.inference.backends import InferenceBackend, Message, get_inference_backend
from resume_parser_ai.utils.logger import get_logger

logger = get_logger(__name__)


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAULTED = "faulted"


class InferenceSessionManager:
    """Owns the model session; see module docstring."""

    def __init__(
        self,
        backend: InferenceBackend,
        timeout_seconds: Optional[float] = INFERENCE_TIMEOUT_SECONDS,
        system_prompt: Optional[str] = SYSTEM_PROMPT,
    ) -> None:
        self._backend = backend
        self._timeout = timeout_seconds if timeout_seconds and timeout_seconds > 0 else None
        self._system_prompt = system_prompt
        self._state = SessionState.UNINITIALIZED
        self._last_error: Optional[BaseException] = None
        self._load_count = 0
        # Loads run on worker threads (warm-up or ensure_ready), so a thread lock
        self._load_lock = threading.Lock()
        self._turn_lock = asyncio.Lock()
        self._history: List[Message] = self._initial_history()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state is SessionState.READY

    @property
    def model_path(self) -> str:
        return self._backend.model_path

    @property
    def load_count(self) -> int:
        return self._load_count

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._last_error

    @property
    def history(self) -> List[Message]:
        return list(self._history)

    def _initial_history(self) -> List[Message]:
        if self._system_prompt:
            return [{"role": "system", "content": self._system_prompt}]
        return []

    def _load_blocking(self) -> None:
        with self._load_lock:
            if self._state is SessionState.READY:
                return
            self._state = SessionState.LOADING
            try:
                self._backend.load()
            except ModelNotFoundError as e:
                self._state = SessionState.FAULTED
                self._last_error = e
                raise
            except Exception as e:
                self._state = SessionState.FAULTED
                self._last_error = e
                raise ModelLoadError(f"Failed to load model from {self.model_path}: {e}") from e
            self._load_count += 1
            self._last_error = None
            self._state = SessionState.READY
            logger.info("Inference session ready (%s)", self.model_path)

    async def ensure_ready(self) -> None:
        """Load the model if needed. No-op when already loaded; retries after a failed load."""
        if self._state is SessionState.READY:
            return
        await asyncio.to_thread(self._load_blocking)

    def warm_up(self) -> threading.Thread:
        """Start loading in the background; failures are logged and retried on next use."""

        def _run() -> None:
            try:
                self._load_blocking()
            except Exception as e:
                logger.error("Failed to initialize LLM model: %s", e)

        thread = threading.Thread(target=_run, name="model-warm-up", daemon=True)
        thread.start()
        return thread

    def _reset_unlocked(self) -> None:
        self._history = self._initial_history()

    async def _complete_unlocked(self, prompt: str) -> str:
        if self._state is not SessionState.READY:
            raise InferenceError("Inference session is not ready")
        messages = self._history + [{"role": "user", "content": prompt}]
        try:
            # The clock covers this generation only, not waiting for an earlier one
            await self._backend.wait_until_idle()
            if self._timeout:
                reply = await asyncio.wait_for(self._backend.chat(messages), timeout=self._timeout)
            else:
                reply = await self._backend.chat(messages)
        except asyncio.TimeoutError as e:
            raise InferenceTimeoutError(f"模型未在 {self._timeout:g} 秒内返回结果") from e
        except InferenceError:
            raise
        except Exception as e:
            raise InferenceError(f"Model call failed: {e}") from e
        self._history = messages + [{"role": "assistant", "content": reply}]
        return reply

    async def reset_turn(self) -> None:
        """Clear the conversation so the next prompt is evaluated on its own."""
        async with self._turn_lock:
            self._reset_unlocked()

    async def complete(self, prompt: str) -> str:
        """Submit one prompt and return the raw reply text."""
        async with self._turn_lock:
            return await self._complete_unlocked(prompt)

    async def run_turn(self, prompt: str) -> str:
        """reset_turn + complete under a single lock acquisition."""
        async with self._turn_lock:
            self._reset_unlocked()
            return await self._complete_unlocked(prompt)


_session_manager: Optional[InferenceSessionManager] = None
_session_manager_lock = threading.Lock()


def get_session_manager() -> InferenceSessionManager:
    """Process-wide session manager built from configuration."""
    global _session_manager
    with _session_manager_lock:
        if _session_manager is None:
            _session_manager = InferenceSessionManager(get_inference_backend())
        return _session_manager
