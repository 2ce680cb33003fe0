"""Export parsed batch items to a CSV spreadsheet. No UI logic; used by app layer."""

import csv
import io
from pathlib import Path
from typing import List, Union

from resume_parser_ai.schemas.batch_item import BatchItem

HEADERS = ["文件名", "姓名", "性别", "年龄", "学历", "手机", "邮箱"]

GENDER_DISPLAY = {"male": "男", "female": "女"}


def _row(index: int, item: BatchItem) -> list:
    r = item.record
    return [
        f"{index}. {item.file_name}",
        (r.name if r else None) or "",
        GENDER_DISPLAY.get(r.gender, "") if r and r.gender else "",
        r.age if r and r.age is not None else "",
        (r.education if r else None) or "",
        (r.phone if r else None) or "",
        (r.email if r else None) or "",
    ]


def export_csv(items: List[BatchItem]) -> bytes:
    """
    Export batch items to CSV bytes, one row per document in batch order.
    UTF-8 with BOM so spreadsheet tools read the Chinese headers.
    """
    if not items:
        raise ValueError("没有可导出的数据")
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(HEADERS)
    for index, item in enumerate(items, start=1):
        writer.writerow(_row(index, item))
    return out.getvalue().encode("utf-8-sig")


def write_csv(items: List[BatchItem], path: Union[str, Path]) -> Path:
    """Write the CSV export to disk and return its path."""
    target = Path(path)
    target.write_bytes(export_csv(items))
    return target
