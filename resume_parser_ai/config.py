"""Configuration loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env: try package dir then project root
_base = Path(__file__).resolve().parent
for _env_path in (_base / ".env", _base.parent / ".env"):
    if load_dotenv(_env_path):
        break
load_dotenv()  # also allow process env


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Inference backend: "llama_cpp" loads a GGUF file in-process,
# "openai_compatible" talks to a local server (Ollama, llama.cpp server)
INFERENCE_BACKEND: str = os.getenv("INFERENCE_BACKEND", "llama_cpp")

# Model artifact location (llama_cpp backend). The model is never downloaded.
MODEL_DIR: str = os.getenv("MODEL_DIR", str(Path.home() / "jianli-jiexi-models"))
MODEL_FILENAME: str = os.getenv("MODEL_FILENAME", "Qwen3-4B-IQ4_NL.gguf")
LLAMA_N_CTX: int = int(os.getenv("LLAMA_N_CTX", "8192"))
LLAMA_N_GPU_LAYERS: int = int(os.getenv("LLAMA_N_GPU_LAYERS", "0"))

# Local OpenAI-compatible server (openai_compatible backend)
LOCAL_LLM_BASE_URL: str = os.getenv("LOCAL_LLM_BASE_URL", "http://localhost:11434/v1")
LOCAL_LLM_API_KEY: str = os.getenv("LOCAL_LLM_API_KEY", "local")
LOCAL_LLM_MODEL: str = os.getenv("LOCAL_LLM_MODEL", "qwen3:4b")

LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.1"))
INFERENCE_TIMEOUT_SECONDS: float = float(os.getenv("INFERENCE_TIMEOUT_SECONDS", "180"))  # 0 disables

# Batch limits (the UI enforces the cap; the pipeline accepts it as a parameter)
MAX_BATCH_SIZE: int = int(os.getenv("MAX_BATCH_SIZE", "10"))
MAX_RESUME_CHARS: int = int(os.getenv("MAX_RESUME_CHARS", "12000"))

# Clear age/gender values that have no explicit wording in the resume text
ENFORCE_EVIDENCE: bool = _env_bool("ENFORCE_EVIDENCE", True)

SUPPORTED_EXTENSIONS: tuple = (".pdf", ".docx")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
