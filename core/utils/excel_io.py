"""Excel 写入公共逻辑：按行写入工作表，可选标红，可追加多个工作表。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import openpyxl  # type: ignore[import-untyped]
from openpyxl.styles import Font  # type: ignore[import-untyped]

RowPredicate = Callable[[tuple[Any, ...]], bool]


@dataclass
class SheetSpec:
    """单个工作表：标题、表头、数据行，以及标红条件。"""

    title: str
    headers: tuple[str, ...]
    rows: list[tuple[Any, ...]] = field(default_factory=list)
    failed_row_predicate: RowPredicate | None = None


def _write_cell(ws: Any, row: int, column: int, value: Any) -> Any:
    cell = ws.cell(row=row, column=column, value=value)
    if isinstance(value, str) and value.startswith("="):
        # 以 = 开头的文本按字符串写入，不作为公式
        cell.data_type = "s"
    return cell


def _fill_sheet(ws: Any, spec: SheetSpec, red_font: Font) -> None:
    ws.title = spec.title
    for col, h in enumerate(spec.headers, start=1):
        _write_cell(ws, 1, col, h)
    for row_idx, row_data in enumerate(spec.rows, start=2):
        mark = bool(spec.failed_row_predicate and spec.failed_row_predicate(row_data))
        for col_idx, value in enumerate(row_data, start=1):
            cell = _write_cell(ws, row_idx, col_idx, value)
            if mark:
                cell.font = red_font


def write_sheets(output_path: Path, sheets: list[SheetSpec], *, red_font_hex: str = "FF0000") -> None:
    """按顺序写入多个工作表；父目录会自动创建。"""
    if not sheets:
        raise ValueError("至少需要一个工作表")
    wb = openpyxl.Workbook()
    ws = wb.active
    if ws is None:
        raise RuntimeError("无法创建工作表")
    red_font = Font(color=red_font_hex)
    _fill_sheet(ws, sheets[0], red_font)
    for spec in sheets[1:]:
        _fill_sheet(wb.create_sheet(), spec, red_font)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(output_path)
    wb.close()
