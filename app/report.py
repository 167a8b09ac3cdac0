"""分析结果输出：匹配结果 -> 表格行 -> Excel（明细 + 店舗汇总）。"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

from core.utils.excel_io import SheetSpec, write_sheets
from domain.inventory import MatchResult, StoreSummary, UsageCell
from models.schemas import ReportSection

# 明细表固定列
BASE_HEADERS = (
    "提供店舗",
    "薬品名",
    "在庫数",
    "使用期限",
    "薬価",
    "在庫金額",
)
USAGE_HEADER_TEMPLATE = "{store} (使用量)"
SUMMARY_HEADERS = ("店舗", "不動品数", "不動品総額", "移動可能金額")

ReportRow = tuple[Any, ...]


def report_headers(store_names: Iterable[str]) -> tuple[str, ...]:
    """固定列 + 每个店舗一列使用量。"""
    return BASE_HEADERS + tuple(USAGE_HEADER_TEMPLATE.format(store=s) for s in store_names)


def _cell(value: UsageCell | None) -> Any:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def build_report_rows(results: list[MatchResult], store_names: Iterable[str]) -> list[ReportRow]:
    """每条匹配结果一行，顺序与 results 一致。"""
    names = list(store_names)
    rows: list[ReportRow] = []
    for m in results:
        rows.append(
            (
                m.provider_store,
                m.item_name,
                _cell(m.stock),
                m.expiry,
                _cell(m.price),
                _cell(m.stock_value),
                *(_cell(m.usage_by_store.get(s)) for s in names),
            )
        )
    return rows


def row_has_candidate(row: ReportRow, store_names: list[str]) -> bool:
    """明细行中是否有提供店舗以外、使用量为正数的店舗。"""
    provider = row[0]
    usages = row[len(BASE_HEADERS) :]
    for store, usage in zip(store_names, usages):
        if store == provider or isinstance(usage, str):
            continue
        if usage > 0:
            return True
    return False


def summary_rows(summaries: list[StoreSummary]) -> list[ReportRow]:
    return [
        (s.store_name, s.item_count, round(s.total_value), round(s.relocatable_value))
        for s in summaries
    ]


def write_report_excel(
    results: list[MatchResult],
    store_names: Iterable[str],
    summaries: list[StoreSummary],
    output_path: Path,
    settings: ReportSection | None = None,
) -> None:
    """写入两张工作表：明细（无候选店舗的行标红）与店舗汇总。"""
    settings = settings or ReportSection()
    names = list(store_names)
    detail_rows = build_report_rows(results, names)
    sheets = [
        SheetSpec(
            title=settings.sheet_title,
            headers=report_headers(names),
            rows=detail_rows,
            failed_row_predicate=lambda row: not row_has_candidate(row, names),
        ),
        SheetSpec(
            title=settings.summary_sheet_title,
            headers=SUMMARY_HEADERS,
            rows=summary_rows(summaries),
        ),
    ]
    write_sheets(Path(output_path), sheets)
