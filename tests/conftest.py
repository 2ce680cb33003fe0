"""Shared fixtures: a scripted in-memory backend and DOCX resume builder."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import pytest
from docx import Document

from resume_parser_ai.inference.backends import InferenceBackend
from resume_parser_ai.inference.session import InferenceSessionManager

Reply = Union[str, Exception]


def record_json(**fields) -> str:
    """Model reply with the six fields, unspecified ones null."""
    base = {k: None for k in ("name", "gender", "age", "education", "phone", "email")}
    base.update(fields)
    return json.dumps(base, ensure_ascii=False)


class ScriptedBackend(InferenceBackend):
    """
    Replies from a list (or a function of the prompt). Fails the test if a
    second chat call starts while one is still running.
    """

    def __init__(
        self,
        replies: Optional[Sequence[Reply]] = None,
        reply_fn: Optional[Callable[[str], Reply]] = None,
        load_error: Optional[Exception] = None,
        delay: float = 0.0,
    ) -> None:
        self._replies = list(replies or [])
        self._reply_fn = reply_fn
        self.load_error = load_error
        self.delay = delay
        self.loads = 0
        self.calls: List[list] = []
        self.active = False
        self.max_active = 0

    @property
    def model_path(self) -> str:
        return "scripted://test-model"

    def load(self) -> None:
        self.loads += 1
        if self.load_error is not None:
            raise self.load_error

    async def chat(self, messages):
        if self.active:
            raise AssertionError("chat entered while another call is in flight")
        self.active = True
        try:
            self.calls.append([dict(m) for m in messages])
            await asyncio.sleep(self.delay)
            prompt = messages[-1]["content"]
            if self._reply_fn is not None:
                reply = self._reply_fn(prompt)
            else:
                reply = self._replies.pop(0) if self._replies else record_json()
            if isinstance(reply, Exception):
                raise reply
            return reply
        finally:
            self.active = False


@pytest.fixture
def scripted_backend() -> ScriptedBackend:
    return ScriptedBackend()


@pytest.fixture
def make_session():
    def _make(backend: InferenceBackend, timeout_seconds: Optional[float] = None) -> InferenceSessionManager:
        return InferenceSessionManager(backend, timeout_seconds=timeout_seconds)

    return _make


@pytest.fixture
def make_docx(tmp_path: Path):
    """Build a .docx resume from paragraph lines and optional table rows."""

    def _make(name: str, lines: Sequence[str], table: Optional[Sequence[Sequence[str]]] = None) -> Path:
        doc = Document()
        for line in lines:
            doc.add_paragraph(line)
        if table:
            t = doc.add_table(rows=len(table), cols=len(table[0]))
            for r, row in enumerate(table):
                for c, value in enumerate(row):
                    t.cell(r, c).text = value
        path = tmp_path / name
        doc.save(str(path))
        return path

    return _make
