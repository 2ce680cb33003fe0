"""Resume pipeline stages: text extraction (PDF/DOCX), prompt, reply decoding."""

from resume_parser_ai.cv_pipeline.evidence import apply_evidence_policy
from resume_parser_ai.cv_pipeline.prompt_builder import build_prompt
from resume_parser_ai.cv_pipeline.reply_normalizer import normalize_reply
from resume_parser_ai.cv_pipeline.text_extractor import extract_text

__all__ = ["extract_text", "build_prompt", "normalize_reply", "apply_evidence_policy"]
