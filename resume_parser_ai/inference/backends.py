"""Inference backends: in-process llama.cpp or a local OpenAI-compatible server."""

import asyncio
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from resume_parser_ai.config import (
    INFERENCE_BACKEND,
    LLAMA_N_CTX,
    LLAMA_N_GPU_LAYERS,
    LLM_TEMPERATURE,
    LOCAL_LLM_API_KEY,
    LOCAL_LLM_BASE_URL,
    LOCAL_LLM_MODEL,
    MODEL_DIR,
    MODEL_FILENAME,
)
from resume_parser_ai.errors import InferenceError, ModelNotFoundError
from resume_parser_ai.inference.model_store import resolve_model_path
from resume_parser_ai.utils.logger import get_logger

logger = get_logger(__name__)

Message = Dict[str, str]


class InferenceBackend(ABC):
    """Abstract chat model. load() blocks and is called once by the session manager."""

    @abstractmethod
    def load(self) -> None:
        """Load the model. Raises ModelNotFoundError if the artifact is missing."""
        ...

    @abstractmethod
    async def chat(self, messages: List[Message]) -> str:
        """Generate the assistant reply for the given conversation."""
        ...

    async def wait_until_idle(self) -> None:
        """Return once no earlier generation is still running. Default: nothing to wait for."""
        return None

    @property
    @abstractmethod
    def model_path(self) -> str:
        """Where the model comes from (file path or server model id)."""
        ...


class LlamaCppBackend(InferenceBackend):
    """Local GGUF model via llama-cpp-python (e.g. Qwen3-4B-IQ4_NL)."""

    def __init__(
        self,
        model_dir: str = MODEL_DIR,
        model_filename: str = MODEL_FILENAME,
        n_ctx: int = LLAMA_N_CTX,
        n_gpu_layers: int = LLAMA_N_GPU_LAYERS,
        temperature: float = LLM_TEMPERATURE,
    ) -> None:
        self._model_dir = model_dir
        self._model_filename = model_filename
        self._n_ctx = n_ctx
        self._n_gpu_layers = n_gpu_layers
        self._temperature = temperature
        self._llama = None
        self._model_path: Optional[str] = None
        # One generation at a time, even if an awaiting caller timed out
        self._generate_lock = threading.Lock()

    @property
    def model_path(self) -> str:
        return self._model_path or f"{self._model_dir}/{self._model_filename}"

    def load(self) -> None:
        path = resolve_model_path(self._model_dir, self._model_filename)
        from llama_cpp import Llama

        logger.info("Loading local model from %s", path)
        self._llama = Llama(
            model_path=str(path),
            n_ctx=self._n_ctx,
            n_gpu_layers=self._n_gpu_layers,
            verbose=False,
        )
        self._model_path = str(path)
        logger.info("Loaded local model: %s", path.name)

    def _generate(self, messages: List[Message]) -> str:
        with self._generate_lock:
            response = self._llama.create_chat_completion(
                messages=messages,
                temperature=self._temperature,
            )
        choices = response.get("choices") or []
        if not choices:
            raise InferenceError("Model returned no choices")
        return choices[0].get("message", {}).get("content") or ""

    def _wait_for_lock(self) -> None:
        with self._generate_lock:
            pass

    async def wait_until_idle(self) -> None:
        # A timed-out turn leaves its generation running on a worker thread
        await asyncio.to_thread(self._wait_for_lock)

    async def chat(self, messages: List[Message]) -> str:
        if self._llama is None:
            raise InferenceError("Model is not loaded")
        return await asyncio.to_thread(self._generate, messages)


class OpenAICompatibleBackend(InferenceBackend):
    """Local server speaking the OpenAI chat API (Ollama, llama.cpp server)."""

    def __init__(
        self,
        base_url: str = LOCAL_LLM_BASE_URL,
        api_key: str = LOCAL_LLM_API_KEY,
        model: str = LOCAL_LLM_MODEL,
        temperature: float = LLM_TEMPERATURE,
    ) -> None:
        self._base_url = base_url
        self._api_key = api_key
        self._model = model
        self._temperature = temperature

    @property
    def model_path(self) -> str:
        return f"{self._base_url.rstrip('/')}/{self._model}"

    def load(self) -> None:
        from openai import OpenAI

        client = OpenAI(base_url=self._base_url, api_key=self._api_key)
        served = [m.id for m in client.models.list()]
        if self._model not in served:
            raise ModelNotFoundError(
                self.model_path,
                hint=f"本地模型服务 {self._base_url} 未提供模型 {self._model}（可用模型：{'、'.join(served) or '无'}）",
            )
        logger.info("Using model %s at %s", self._model, self._base_url)

    async def chat(self, messages: List[Message]) -> str:
        from openai import AsyncOpenAI

        # Client per call: the caller may run each batch on a fresh event loop
        async with AsyncOpenAI(base_url=self._base_url, api_key=self._api_key) as client:
            response = await client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=self._temperature,
            )
        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message:
            raise InferenceError("Model returned no choices")
        return choice.message.content or ""


def get_inference_backend(backend: Optional[str] = None) -> InferenceBackend:
    """
    Return the configured inference backend (dependency injection).
    backend: override config; None uses INFERENCE_BACKEND.
    """
    b = (backend or INFERENCE_BACKEND).strip().lower()
    if b in ("openai", "openai_compatible", "ollama"):
        return OpenAICompatibleBackend()
    if b != "llama_cpp":
        logger.warning("Unknown INFERENCE_BACKEND %r; using llama_cpp", b)
    return LlamaCppBackend()
