"""Batch Agent: run resumes one at a time through extract, prompt, LLM, decode."""

import asyncio
from pathlib import Path
from typing import AsyncIterator, Callable, List, Optional, Sequence, Union

from resume_parser_ai.config import ENFORCE_EVIDENCE
from resume_parser_ai.cv_pipeline.evidence import apply_evidence_policy
from resume_parser_ai.cv_pipeline.prompt_builder import build_prompt
from resume_parser_ai.cv_pipeline.reply_normalizer import normalize_reply
from resume_parser_ai.cv_pipeline.text_extractor import extract_text
from resume_parser_ai.errors import BatchSizeError, InferenceError
from resume_parser_ai.inference.session import InferenceSessionManager
from resume_parser_ai.schemas.batch_item import BatchItem
from resume_parser_ai.schemas.resume_record import ResumeRecord
from resume_parser_ai.utils.logger import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]
ItemCallback = Callable[[BatchItem], None]
StartCallback = Callable[[List[BatchItem]], None]


async def _parse_one(
    session: InferenceSessionManager,
    path: PathLike,
    enforce_evidence: bool,
) -> ResumeRecord:
    """Extract text, run one isolated model turn, decode the reply."""
    text = await asyncio.to_thread(extract_text, path)
    prompt = build_prompt(text)
    reply = await session.run_turn(prompt)
    record = normalize_reply(reply)
    if enforce_evidence:
        record = apply_evidence_policy(record, text)
    return record


async def stream_batch(
    paths: Sequence[PathLike],
    session: InferenceSessionManager,
    max_batch_size: Optional[int] = None,
    enforce_evidence: bool = ENFORCE_EVIDENCE,
    on_start: Optional[StartCallback] = None,
) -> AsyncIterator[BatchItem]:
    """
    Yield one BatchItem per path, in input order, as each document finishes.
    Documents run strictly sequentially: they share one session and its history.
    Per-document errors become failed items; only session setup errors
    (ModelNotFoundError, ModelLoadError) and BatchSizeError propagate.
    An empty batch yields nothing and never touches the session.

    Every item is created pending before the first document runs; on_start
    receives that list, and the yielded items are the same objects.
    """
    documents = [str(p) for p in paths]
    if not documents:
        logger.info("Empty batch; nothing to parse")
        return
    if max_batch_size is not None and len(documents) > max_batch_size:
        raise BatchSizeError(len(documents), max_batch_size)

    items = [BatchItem(document_id=document_id) for document_id in documents]
    if on_start is not None:
        on_start(items)

    await session.ensure_ready()

    for item in items:
        document_id = item.document_id
        try:
            record = await _parse_one(session, document_id, enforce_evidence)
            item.mark_parsed(record)
            logger.info(
                "Resume parsed: %s degraded=%s", item.file_name, record.is_degraded
            )
        except (OSError, InferenceError) as e:
            logger.warning("Resume failed: %s: %s", document_id, e)
            item.mark_failed(str(e) or e.__class__.__name__)
        except Exception as e:
            logger.exception("Unexpected error parsing %s", document_id)
            item.mark_failed(str(e) or e.__class__.__name__)
        yield item


async def run_batch(
    paths: Sequence[PathLike],
    session: InferenceSessionManager,
    on_item: Optional[ItemCallback] = None,
    max_batch_size: Optional[int] = None,
    enforce_evidence: bool = ENFORCE_EVIDENCE,
    on_start: Optional[StartCallback] = None,
) -> List[BatchItem]:
    """
    Run the batch to completion. on_start gets the pending items, on_item is
    called for every item as it finishes; the returned list is the final batch state.
    """
    items: List[BatchItem] = []
    async for item in stream_batch(
        paths,
        session,
        max_batch_size=max_batch_size,
        enforce_evidence=enforce_evidence,
        on_start=on_start,
    ):
        items.append(item)
        if on_item is not None:
            on_item(item)
    parsed = sum(1 for i in items if i.record is not None)
    logger.info("Batch Agent finished: documents=%s parsed=%s failed=%s", len(items), parsed, len(items) - parsed)
    return items
