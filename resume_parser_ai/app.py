"""
Resume Parsing Assistant – Streamlit frontend.
No business logic in layout; parsing runs in the batch agent, export in services.
"""

import asyncio
import tempfile
from pathlib import Path
from typing import Callable, List, Optional

import streamlit as st

from resume_parser_ai.agents.batch_agent import run_batch
from resume_parser_ai.config import MAX_BATCH_SIZE, SUPPORTED_EXTENSIONS
from resume_parser_ai.errors import BatchSizeError, ModelLoadError, ModelNotFoundError
from resume_parser_ai.inference.session import InferenceSessionManager, get_session_manager
from resume_parser_ai.schemas.batch_item import BatchItem, BatchStatus
from resume_parser_ai.services.export_service import GENDER_DISPLAY, export_csv

STATUS_DISPLAY = {
    BatchStatus.PENDING: "解析中",
    BatchStatus.PARSED: "已解析",
    BatchStatus.FAILED: "失败",
}


@st.cache_resource
def _session() -> InferenceSessionManager:
    """Process-wide session; the model starts loading as soon as the app starts."""
    session = get_session_manager()
    session.warm_up()
    return session


def _run_pipeline(
    paths: List[str],
    session: InferenceSessionManager,
    on_start: Callable[[List[BatchItem]], None],
    on_item: Callable[[BatchItem], None],
) -> List[BatchItem]:
    """Run the batch agent on a fresh event loop; return the final items."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(
            run_batch(
                paths,
                session,
                on_item=on_item,
                max_batch_size=MAX_BATCH_SIZE,
                on_start=on_start,
            )
        )
    finally:
        loop.close()


def _save_uploads(uploaded_files, target_dir: Path) -> List[str]:
    """Write uploads to disk so the pipeline works on paths; keeps upload order."""
    paths = []
    for index, upload in enumerate(uploaded_files):
        # One folder per upload keeps same-named files apart and the original name intact
        folder = target_dir / f"{index:02d}"
        folder.mkdir()
        path = folder / Path(upload.name).name
        path.write_bytes(upload.getvalue())
        paths.append(str(path))
    return paths


def _table_rows(items: List[BatchItem]) -> List[dict]:
    rows = []
    for index, item in enumerate(items, start=1):
        r = item.record
        rows.append(
            {
                "#": index,
                "文件名": item.file_name,
                "状态": STATUS_DISPLAY[item.status],
                "姓名": (r.name if r else None) or "",
                "性别": GENDER_DISPLAY.get(r.gender, "") if r and r.gender else "",
                "年龄": str(r.age) if r and r.age is not None else "",
                "学历": (r.education if r else None) or "",
                "手机": (r.phone if r else None) or "",
                "邮箱": (r.email if r else None) or "",
                "备注": item.error or ("模型输出无法解析" if r and r.is_degraded else ""),
            }
        )
    return rows


def _model_status(session: InferenceSessionManager) -> Optional[str]:
    if session.is_loaded:
        return None
    if session.last_error is not None:
        return f"模型加载失败：{session.last_error}"
    return "模型加载中，首次解析可能需要等待…"


def render_layout() -> None:
    """Streamlit page layout; parsing and export use the agent and services layers."""
    st.set_page_config(page_title="简历解析助手", layout="wide")
    st.title("简历解析助手")
    st.markdown("*从 PDF / DOCX 简历中提取姓名、性别、年龄、学历、手机和邮箱（本地模型）。*")
    st.divider()

    session = _session()
    status = _model_status(session)
    if status:
        st.caption(status)

    # Session state: results of the last batch, error
    if "results" not in st.session_state:
        st.session_state["results"] = []
    if "error" not in st.session_state:
        st.session_state["error"] = None

    uploaded_files = st.file_uploader(
        f"选择简历文件（PDF/DOCX，最多 {MAX_BATCH_SIZE} 个）",
        type=[ext.lstrip(".") for ext in SUPPORTED_EXTENSIONS],
        accept_multiple_files=True,
        key="resume_files",
    )
    parse_clicked = st.button("开始解析", type="primary", key="parse_btn")
    table = st.empty()

    if parse_clicked:
        if not uploaded_files:
            st.session_state["error"] = "请先选择简历文件。"
        elif len(uploaded_files) > MAX_BATCH_SIZE:
            st.session_state["error"] = f"一次最多解析 {MAX_BATCH_SIZE} 个文件。"
        else:
            # A new batch replaces the previous one
            st.session_state["error"] = None
            st.session_state["results"] = []
            with tempfile.TemporaryDirectory(prefix="resumes-") as tmp:
                paths = _save_uploads(uploaded_files, Path(tmp))
                batch: List[BatchItem] = []

                def on_start(items: List[BatchItem]) -> None:
                    # Every file is listed as pending until its turn finishes
                    batch[:] = items
                    table.dataframe(_table_rows(batch), hide_index=True, use_container_width=True)

                def on_item(item: BatchItem) -> None:
                    table.dataframe(_table_rows(batch), hide_index=True, use_container_width=True)

                with st.spinner("正在解析简历…"):
                    try:
                        st.session_state["results"] = _run_pipeline(paths, session, on_start, on_item)
                    except (ModelNotFoundError, ModelLoadError, BatchSizeError) as e:
                        st.session_state["error"] = str(e)
                    except Exception as e:
                        st.session_state["error"] = f"解析失败：{str(e)}"
                        st.session_state["results"] = batch

    if st.session_state.get("error"):
        st.error(st.session_state["error"])

    results: List[BatchItem] = st.session_state.get("results") or []
    if not results:
        if not parse_clicked and not st.session_state.get("error"):
            st.info("选择简历文件后点击 **开始解析**。")
        return

    table.dataframe(_table_rows(results), hide_index=True, use_container_width=True)
    failed = sum(1 for i in results if i.status is BatchStatus.FAILED)
    st.markdown(f"**共 {len(results)} 份** · **失败 {failed} 份**")

    st.download_button(
        "导出为表格 (CSV)",
        data=export_csv(results),
        file_name="简历解析结果.csv",
        mime="text/csv",
        key="export_csv",
    )


if __name__ == "__main__":
    render_layout()
