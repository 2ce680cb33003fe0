"""Resume Parser AI: structured candidate fields from PDF/DOCX resumes via a local LLM."""

__version__ = "0.1.0"
