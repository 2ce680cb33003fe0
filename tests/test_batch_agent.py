"""Tests for the sequential batch agent."""

from __future__ import annotations

import pytest

from resume_parser_ai.agents.batch_agent import run_batch, stream_batch
from resume_parser_ai.errors import BatchSizeError, InferenceError, ModelLoadError, ModelNotFoundError
from resume_parser_ai.schemas.batch_item import BatchStatus

from .conftest import ScriptedBackend, record_json


@pytest.fixture
def three_resumes(make_docx):
    return [
        make_docx("a.docx", ["张三", "性别：男", "年龄：28岁", "电话：13800138000"]),
        make_docx("b.docx", ["李四", "邮箱：lisi@example.com"]),
        make_docx("c.docx", ["王五", "学历：本科"]),
    ]


def _reply_by_name(prompt: str) -> str:
    for name in ("张三", "李四", "王五"):
        if name in prompt:
            return record_json(name=name)
    return record_json()


@pytest.mark.asyncio
async def test_empty_batch_is_noop_without_loading(make_session) -> None:
    backend = ScriptedBackend()
    session = make_session(backend)
    assert await run_batch([], session) == []
    assert backend.loads == 0
    assert not session.is_loaded


@pytest.mark.asyncio
async def test_one_event_per_document_in_input_order(make_session, three_resumes) -> None:
    backend = ScriptedBackend(reply_fn=_reply_by_name)
    session = make_session(backend)
    seen = []

    items = await run_batch(three_resumes, session, on_item=seen.append)

    assert [i.document_id for i in items] == [str(p) for p in three_resumes]
    assert seen == items
    assert all(i.status is BatchStatus.PARSED for i in items)
    assert [i.record.name for i in items] == ["张三", "李四", "王五"]
    assert backend.loads == 1


@pytest.mark.asyncio
async def test_each_document_gets_fresh_history(make_session, three_resumes) -> None:
    backend = ScriptedBackend(reply_fn=_reply_by_name)
    await run_batch(three_resumes, make_session(backend))
    assert len(backend.calls) == 3
    for messages, name in zip(backend.calls, ["张三", "李四", "王五"]):
        assert [m["role"] for m in messages] == ["system", "user"]
        assert name in messages[-1]["content"]


@pytest.mark.asyncio
async def test_complete_calls_do_not_overlap(make_session, three_resumes) -> None:
    backend = ScriptedBackend(reply_fn=_reply_by_name, delay=0.01)
    items = await run_batch(three_resumes, make_session(backend))
    # An overlapping call would have failed that document
    assert all(i.status is BatchStatus.PARSED for i in items)


@pytest.mark.asyncio
async def test_extraction_failure_is_isolated(make_session, three_resumes, tmp_path) -> None:
    paths = [three_resumes[0], tmp_path / "missing.pdf", three_resumes[2]]
    backend = ScriptedBackend(reply_fn=_reply_by_name)

    items = await run_batch(paths, make_session(backend))

    assert [i.status for i in items] == [BatchStatus.PARSED, BatchStatus.FAILED, BatchStatus.PARSED]
    assert items[1].record is None
    assert items[1].error
    assert items[0].record.name == "张三"
    assert items[2].record.name == "王五"
    assert len(backend.calls) == 2


@pytest.mark.asyncio
async def test_inference_failure_is_isolated(make_session, three_resumes) -> None:
    backend = ScriptedBackend(
        replies=[record_json(name="张三"), InferenceError("model crashed"), record_json(name="王五")]
    )
    items = await run_batch(three_resumes, make_session(backend))
    assert [i.status for i in items] == [BatchStatus.PARSED, BatchStatus.FAILED, BatchStatus.PARSED]
    assert "model crashed" in items[1].error


@pytest.mark.asyncio
async def test_undecodable_reply_is_parsed_with_raw(make_session, three_resumes) -> None:
    backend = ScriptedBackend(replies=["I could not read this resume."])
    items = await run_batch(three_resumes[:1], make_session(backend))
    assert items[0].status is BatchStatus.PARSED
    assert items[0].record.is_degraded
    assert items[0].record.raw == "I could not read this resume."


@pytest.mark.asyncio
async def test_birth_date_without_age_statement_yields_null_age(make_session, make_docx) -> None:
    path = make_docx("d.docx", ["赵六", "出生日期：1995年3月12日", "性别：女"])
    backend = ScriptedBackend(replies=[record_json(name="赵六", gender="female", age=29)])
    items = await run_batch([path], make_session(backend))
    record = items[0].record
    assert record.age is None
    assert record.gender == "female"


@pytest.mark.asyncio
async def test_explicit_age_is_kept(make_session, three_resumes) -> None:
    backend = ScriptedBackend(replies=[record_json(name="张三", gender="male", age=28)])
    items = await run_batch(three_resumes[:1], make_session(backend))
    assert items[0].record.age == 28
    assert items[0].record.gender == "male"


@pytest.mark.asyncio
async def test_missing_model_fails_batch_before_any_document(make_session, three_resumes) -> None:
    backend = ScriptedBackend(load_error=ModelNotFoundError("/models/m.gguf"))
    seen = []
    with pytest.raises(ModelNotFoundError):
        await run_batch(three_resumes, make_session(backend), on_item=seen.append)
    assert seen == []
    assert backend.calls == []


@pytest.mark.asyncio
async def test_load_error_fails_batch(make_session, three_resumes) -> None:
    with pytest.raises(ModelLoadError):
        await run_batch(three_resumes, make_session(ScriptedBackend(load_error=RuntimeError("corrupt"))))


@pytest.mark.asyncio
async def test_batch_size_cap(make_session, three_resumes) -> None:
    backend = ScriptedBackend()
    with pytest.raises(BatchSizeError, match="一次最多解析 2 个文件"):
        await run_batch(three_resumes, make_session(backend), max_batch_size=2)
    assert backend.loads == 0


@pytest.mark.asyncio
async def test_stream_yields_incrementally(make_session, three_resumes) -> None:
    backend = ScriptedBackend(reply_fn=_reply_by_name)
    emitted = 0
    async for item in stream_batch(three_resumes, make_session(backend)):
        emitted += 1
        # Nothing runs ahead of the consumer
        assert len(backend.calls) == emitted
        assert item.status is BatchStatus.PARSED
    assert emitted == 3


@pytest.mark.asyncio
async def test_items_start_pending_and_are_updated_in_place(make_session, three_resumes) -> None:
    backend = ScriptedBackend(reply_fn=_reply_by_name)
    started = []

    def on_start(items) -> None:
        started.extend(items)
        assert [i.status for i in items] == [BatchStatus.PENDING] * 3
        assert all(i.record is None for i in items)
        assert backend.calls == []

    items = await run_batch(three_resumes, make_session(backend), on_start=on_start)

    assert [i.document_id for i in started] == [str(p) for p in three_resumes]
    assert all(a is b for a, b in zip(started, items))
    assert all(i.status is BatchStatus.PARSED for i in started)


@pytest.mark.asyncio
async def test_later_items_stay_pending_while_earlier_ones_run(make_session, three_resumes) -> None:
    backend = ScriptedBackend(reply_fn=_reply_by_name)
    started = []
    async for item in stream_batch(three_resumes, make_session(backend), on_start=started.extend):
        position = started.index(item)
        assert all(i.status is BatchStatus.PARSED for i in started[: position + 1])
        assert all(i.status is BatchStatus.PENDING for i in started[position + 1 :])
