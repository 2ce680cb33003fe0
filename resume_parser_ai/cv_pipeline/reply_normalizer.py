"""
Decode a free-text model reply into a ResumeRecord.

Local models wrap their JSON in prose, code fences or reasoning blocks. The
reply is run through an ordered chain of decoders; the first that yields a
JSON object wins. If none does, a sentinel record carrying the raw reply is
returned so the document still gets a result.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError

from resume_parser_ai.schemas.resume_record import ResumeRecord
from resume_parser_ai.utils.logger import get_logger

logger = get_logger(__name__)

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)
_JSON_FENCE = re.compile(r"```json([\s\S]*?)```", re.IGNORECASE)
_ANY_FENCE = re.compile(r"```([\s\S]*?)```")


def _try_parse_object(text: str) -> Optional[dict]:
    """json.loads that returns None unless the result is a JSON object."""
    try:
        parsed = json.loads(text)
    except (ValueError, TypeError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


def strip_reasoning(reply: str) -> str:
    """Drop <think>...</think> blocks emitted by reasoning models."""
    return _THINK_BLOCK.sub("", reply).strip()


def find_fenced_block(text: str) -> Optional[str]:
    """Contents of the first ```json block, else of the first ``` block."""
    match = _JSON_FENCE.search(text) or _ANY_FENCE.search(text)
    return match.group(1) if match else None


class ReplyDecoder(ABC):
    """One decoding strategy: a dict on success, None otherwise."""

    name: str = "decoder"

    @abstractmethod
    def decode(self, text: str) -> Optional[dict]:
        ...


class DirectJsonDecoder(ReplyDecoder):
    """The whole reply is JSON."""

    name = "direct"

    def decode(self, text: str) -> Optional[dict]:
        return _try_parse_object(text)


class FencedBlockDecoder(ReplyDecoder):
    """JSON inside a markdown code fence, optionally tagged json."""

    name = "fenced"

    def decode(self, text: str) -> Optional[dict]:
        block = find_fenced_block(text)
        if block is None:
            return None
        return _try_parse_object(block.strip())


class BraceSpanDecoder(ReplyDecoder):
    """First '{' to last '}' of the fence-stripped text."""

    name = "brace_span"

    def decode(self, text: str) -> Optional[dict]:
        block = find_fenced_block(text)
        if block is not None:
            text = block
        first = text.find("{")
        last = text.rfind("}")
        if first == -1 or last == -1 or last <= first:
            return None
        return _try_parse_object(text[first : last + 1])


DEFAULT_DECODERS: List[ReplyDecoder] = [
    DirectJsonDecoder(),
    FencedBlockDecoder(),
    BraceSpanDecoder(),
]


def decode_reply(reply: str, decoders: Optional[List[ReplyDecoder]] = None) -> Optional[dict]:
    """Run the decoder chain; first match wins."""
    text = strip_reasoning(reply)
    for decoder in decoders or DEFAULT_DECODERS:
        parsed = decoder.decode(text)
        if parsed is not None:
            logger.debug("Model reply decoded by %s strategy", decoder.name)
            return parsed
    return None


def normalize_reply(reply: Any, decoders: Optional[List[ReplyDecoder]] = None) -> ResumeRecord:
    """
    Map an arbitrary model reply to a ResumeRecord. Never raises: an
    undecodable reply yields ResumeRecord.from_raw_reply(reply).
    """
    if isinstance(reply, Mapping):
        parsed: Optional[dict] = dict(reply)
    elif isinstance(reply, str) and reply.strip():
        parsed = decode_reply(reply, decoders)
    else:
        parsed = None

    if parsed is None:
        logger.warning("Could not decode model reply as JSON; keeping raw reply")
        return ResumeRecord.from_raw_reply(reply)

    # Fields are set from the model output; raw is reserved for the sentinel
    parsed.pop("raw", None)
    try:
        return ResumeRecord.model_validate(parsed)
    except ValidationError as e:
        logger.warning("Model reply failed record validation: %s", e)
        return ResumeRecord.from_raw_reply(reply)
