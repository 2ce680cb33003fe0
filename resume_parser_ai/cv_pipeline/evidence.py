"""Clear age and gender values the resume text does not state explicitly."""

import re

from resume_parser_ai.schemas.resume_record import ResumeRecord
from resume_parser_ai.utils.logger import get_logger

logger = get_logger(__name__)

_GENDER_WORDING = re.compile(
    r"性别|(?<![一-鿿])[男女](?![一-鿿])|\b(?:gender|sex|male|female)\b",
    re.IGNORECASE,
)


def _age_patterns(age: int) -> list:
    n = str(age)
    return [
        rf"(?<!\d){n}\s*周?岁",
        rf"年\s*龄\s*[:：]?\s*{n}(?!\d)",
        rf"\bage\s*[:：]?\s*{n}(?!\d)",
        rf"(?<!\d){n}\s*(?:years?\s*old|y/?o)\b",
    ]


def has_age_statement(text: str, age: int) -> bool:
    """True if the text states this age in words, not only as a birth date."""
    return any(re.search(p, text, re.IGNORECASE) for p in _age_patterns(age))


def has_gender_wording(text: str) -> bool:
    return bool(_GENDER_WORDING.search(text))


def apply_evidence_policy(record: ResumeRecord, document_text: str) -> ResumeRecord:
    """Return a copy of the record without age/gender values lacking explicit wording."""
    if record.is_degraded:
        return record
    text = document_text or ""
    update = {}
    if record.age is not None and not has_age_statement(text, record.age):
        logger.info("Dropping age %s: no explicit age statement in resume text", record.age)
        update["age"] = None
    if record.gender is not None and not has_gender_wording(text):
        logger.info("Dropping gender %s: no explicit gender wording in resume text", record.gender)
        update["gender"] = None
    return record.model_copy(update=update) if update else record
