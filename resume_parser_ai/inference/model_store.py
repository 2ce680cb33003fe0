"""Per-user model directory: created on demand, never populated by us."""

from pathlib import Path
from typing import Optional

from resume_parser_ai.config import MODEL_DIR, MODEL_FILENAME
from resume_parser_ai.errors import ModelNotFoundError
from resume_parser_ai.utils.logger import get_logger

logger = get_logger(__name__)


def ensure_user_model_dir(model_dir: Optional[str] = None) -> Path:
    """Return the model directory, creating it if absent."""
    path = Path(model_dir or MODEL_DIR).expanduser()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        # A missing directory surfaces later as ModelNotFoundError with the path
        logger.error("Failed to create user model directory %s: %s", path, e)
    return path


def resolve_model_path(model_dir: Optional[str] = None, filename: Optional[str] = None) -> Path:
    """
    Path of the model artifact inside the user model directory.
    Raises ModelNotFoundError telling the user where to put the file.
    """
    name = filename or MODEL_FILENAME
    model_path = ensure_user_model_dir(model_dir) / name
    if not model_path.is_file():
        raise ModelNotFoundError(
            str(model_path),
            hint=f"模型文件不存在，请将 {name} 放到: {model_path}",
        )
    return model_path
