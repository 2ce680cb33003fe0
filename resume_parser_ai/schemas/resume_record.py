"""Structured resume record extracted by the local LLM."""

import re
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Values models use to say "not found"
_NULL_STRINGS = {"", "null", "none", "n/a", "na", "无", "未知", "不详", "未提及"}

_GENDER_MAP = {
    "male": "male",
    "m": "male",
    "man": "male",
    "男": "male",
    "男性": "male",
    "female": "female",
    "f": "female",
    "woman": "female",
    "女": "female",
    "女性": "female",
}

_LEADING_INT = re.compile(r"^\s*(\d{1,3})(?:\.0+)?\s*(?:岁|周岁|years?(?:\s+old)?)?\s*$", re.IGNORECASE)

RECORD_FIELDS = ("name", "gender", "age", "education", "phone", "email")


def _clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if text.lower() in _NULL_STRINGS:
        return None
    return text


class ResumeRecord(BaseModel):
    """
    Six candidate fields, each None unless the resume states it explicitly.
    `raw` is set only on the sentinel returned when the model reply had no JSON.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(default=None, description="Candidate name")
    gender: Optional[Literal["male", "female"]] = Field(default=None, description="Explicitly stated gender")
    age: Optional[int] = Field(default=None, description="Explicitly stated age in years")
    education: Optional[str] = Field(default=None, description="Highest education level (e.g. 本科, 硕士)")
    phone: Optional[str] = Field(default=None, description="Mobile phone number")
    email: Optional[str] = Field(default=None, description="Email address")
    raw: Optional[str] = Field(default=None, description="Raw model reply when no JSON could be decoded")

    @field_validator("name", "education", "phone", "email", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Optional[str]:
        if isinstance(v, (dict, list)):
            return None
        return _clean_str(v)

    @field_validator("gender", mode="before")
    @classmethod
    def _coerce_gender(cls, v: Any) -> Optional[str]:
        text = _clean_str(v) if isinstance(v, str) else None
        if text is None:
            return None
        return _GENDER_MAP.get(text.lower())

    @field_validator("age", mode="before")
    @classmethod
    def _coerce_age(cls, v: Any) -> Optional[int]:
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, int):
            return v if 0 < v < 150 else None
        if isinstance(v, float):
            return int(v) if v.is_integer() and 0 < v < 150 else None
        if isinstance(v, str):
            match = _LEADING_INT.match(v)
            if match:
                age = int(match.group(1))
                return age if 0 < age < 150 else None
        return None

    @field_validator("raw", mode="before")
    @classmethod
    def _coerce_raw(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return v if isinstance(v, str) else repr(v)

    @classmethod
    def from_raw_reply(cls, reply: Any) -> "ResumeRecord":
        """Sentinel for a reply that could not be decoded into fields."""
        return cls(raw=reply if isinstance(reply, str) else repr(reply))

    @property
    def is_degraded(self) -> bool:
        return self.raw is not None

    def fields(self) -> dict:
        """The six structured fields, without the diagnostic reply."""
        return {k: getattr(self, k) for k in RECORD_FIELDS}
