"""Extract raw text from resume files (PDF, DOCX) by file extension."""

import re
import unicodedata
from io import BytesIO
from pathlib import Path
from typing import Union

import pdfplumber
from docx import Document

from resume_parser_ai.config import MAX_RESUME_CHARS
from resume_parser_ai.errors import DocumentExtractionError
from resume_parser_ai.utils.logger import get_logger

logger = get_logger(__name__)

# Appended after truncated text; the prompt around it is Chinese
TRUNCATION_MARKER = "[内容已截断]"


def _normalize_unicode(text: str) -> str:
    """Normalize unicode (NFC) and replace problematic chars."""
    if not text:
        return ""
    return unicodedata.normalize("NFC", text)


def clean_resume_text(text: str, max_chars: int = MAX_RESUME_CHARS) -> str:
    """Remove excessive whitespace and normalize unicode for resume content."""
    if not text or not text.strip():
        return ""
    t = _normalize_unicode(text)
    t = re.sub(r"[ \t]+", " ", t)
    t = re.sub(r"\n\s*\n\s*\n", "\n\n", t)
    t = t.strip()
    if max_chars and len(t) > max_chars:
        t = t[:max_chars] + "\n\n" + TRUNCATION_MARKER
    return t


def _extract_pdf(bytes_io: BytesIO) -> str:
    """Extract text from PDF using pdfplumber."""
    with pdfplumber.open(bytes_io) as pdf:
        parts = []
        for page in pdf.pages:
            ptext = page.extract_text()
            if ptext:
                parts.append(ptext)
        return "\n\n".join(parts)


def _extract_docx(bytes_io: BytesIO) -> str:
    """Extract text from DOCX using python-docx: paragraphs, then table cells."""
    doc = Document(bytes_io)
    parts = [p.text for p in doc.paragraphs if p.text.strip()]
    # Many resume templates put contact details in tables
    for table in doc.tables:
        for row in table.rows:
            cells = []
            for cell in row.cells:
                ctext = cell.text.strip()
                if ctext and ctext not in cells:
                    cells.append(ctext)
            if cells:
                parts.append(" ".join(cells))
    return "\n\n".join(parts)


_DECODERS = {
    ".pdf": _extract_pdf,
    ".docx": _extract_docx,
}


def extract_text(path: Union[str, Path]) -> str:
    """
    Extract and clean text from a resume file, dispatching on its extension.
    Unsupported extensions return "". OSError propagates if the file cannot be read;
    DocumentExtractionError (an OSError) if the format library cannot decode it.
    """
    file_path = Path(path)
    file_bytes = file_path.read_bytes()
    decoder = _DECODERS.get(file_path.suffix.lower())
    if decoder is None:
        logger.warning("Unsupported file type: %s", file_path.name)
        return ""

    try:
        raw = decoder(BytesIO(file_bytes))
    except Exception as e:
        raise DocumentExtractionError(f"Could not decode {file_path.name}: {e}") from e

    text = clean_resume_text(raw)
    if not text:
        logger.warning("No text extracted from %s", file_path.name)
    return text
