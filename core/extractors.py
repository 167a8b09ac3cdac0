"""
从解析后的表格中抽取店舗记录：先找表头行，再按表头文字定位列，最后逐行读取表头以下的数据。

- 使用实绩（ZaikoKin）：表头按「包含」匹配，使用量列找不到或为 0 时回退到固定列。
- 不动品（HudoAddList）：首列为 No. 的行是表头，各列按「完全一致」匹配，找不到为 -1。
标签变体全部由 ExtractionSection 传入，本模块为纯函数。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from domain.inventory import DeadstockRecord, UsageRecord
from models.schemas import ExtractionSection

from .normalizer import normalize_name
from .tabular import cell_at, parse_number

Row = list[str]
CellPredicate = Callable[[str], bool]

MISSING_COLUMN = -1


@dataclass
class UsageExtraction:
    """使用实绩抽取结果：文件内店舗名（可能为 None）与记录列表（无表头时为 None）。"""

    store_name: str | None
    records: list[UsageRecord] | None
    header_row: int = MISSING_COLUMN
    name_column: int = MISSING_COLUMN
    usage_column: int = MISSING_COLUMN


def contains_any(labels: Iterable[str]) -> CellPredicate:
    labels = tuple(labels)
    return lambda cell: any(label in cell for label in labels)


def equals_any(labels: Iterable[str]) -> CellPredicate:
    labels = tuple(labels)
    return lambda cell: cell in labels


def find_column(header: Row, predicate: CellPredicate) -> int:
    """表头中第一个满足条件的列索引（0-based），未找到返回 -1。"""
    for i, h in enumerate(header):
        if predicate(str(h)):
            return i
    return MISSING_COLUMN


def find_header_row(rows: list[Row], predicate: Callable[[Row], bool]) -> int:
    """第一行满足条件的行索引，未找到返回 -1。"""
    for i, row in enumerate(rows):
        if predicate(row):
            return i
    return MISSING_COLUMN


def discover_store_name(rows: list[Row], labels: ExtractionSection) -> str | None:
    """
    在前 store_scan_rows 行中找包含店舗标签的单元格，取其右侧单元格为店舗名。
    右侧为空时继续看下一行；找到即停止。
    """
    is_store_label = contains_any(labels.store_labels)
    for row in rows[: labels.store_scan_rows]:
        idx = find_column(row, lambda c: bool(c) and is_store_label(c))
        if idx == MISSING_COLUMN:
            continue
        value = cell_at(row, idx + 1).strip()
        if value:
            return value
    return None


def _usage_header_predicate(labels: ExtractionSection) -> Callable[[Row], bool]:
    is_name = contains_any(labels.usage_name_labels)
    is_marker = contains_any(labels.usage_header_markers)
    is_exact = equals_any(labels.usage_header_exact_markers)

    def predicate(row: Row) -> bool:
        cells = [str(c) for c in row]
        has_name = any(is_name(c) for c in cells)
        has_other = any(is_marker(c) or is_exact(c) for c in cells)
        return has_name and has_other

    return predicate


def _read_quantity(row: Row, column: int) -> float | None:
    return parse_number(cell_at(row, column))


def resolve_usage(row: Row, usage_column: int, fallback_column: int) -> float:
    """
    先读识别到的使用量列；结果为 0 或无法解析、且该列不是回退列时，
    再读回退列，仅当其为正数时采用。
    """
    qty = _read_quantity(row, usage_column) or 0.0
    if qty == 0 and usage_column != fallback_column:
        fallback = _read_quantity(row, fallback_column)
        if fallback is not None and fallback > 0:
            qty = fallback
    return qty


def extract_usage_records(rows: list[Row], labels: ExtractionSection) -> UsageExtraction:
    """从使用实绩表抽取 UsageRecord 列表及文件内店舗名。"""
    store_name = discover_store_name(rows, labels)
    header_idx = find_header_row(rows, _usage_header_predicate(labels))
    if header_idx == MISSING_COLUMN:
        return UsageExtraction(store_name=store_name, records=None)

    header = [str(h) for h in rows[header_idx]]
    name_col = find_column(header, contains_any(labels.usage_name_labels))
    usage_col = find_column(header, contains_any(labels.usage_quantity_labels))
    if usage_col == MISSING_COLUMN:
        usage_col = labels.usage_fallback_column
    if name_col == MISSING_COLUMN:
        return UsageExtraction(store_name=store_name, records=None, header_row=header_idx)

    records: list[UsageRecord] = []
    for row in rows[header_idx + 1 :]:
        raw_name = cell_at(row, name_col)
        if not raw_name.strip():
            continue
        records.append(
            UsageRecord(
                name=raw_name,
                normalized_name=normalize_name(raw_name),
                usage=resolve_usage(row, usage_col, labels.usage_fallback_column),
            )
        )
    return UsageExtraction(
        store_name=store_name,
        records=records,
        header_row=header_idx,
        name_column=name_col,
        usage_column=usage_col,
    )


def extract_deadstock_records(rows: list[Row], labels: ExtractionSection) -> list[DeadstockRecord] | None:
    """从不动品表抽取 DeadstockRecord 列表；无表头或无品名列时返回 None。"""
    is_header_first = equals_any(labels.deadstock_header_first_cells)
    header_idx = find_header_row(rows, lambda row: bool(row) and is_header_first(str(row[0])))
    if header_idx == MISSING_COLUMN:
        return None

    header = [str(h) for h in rows[header_idx]]
    name_col = find_column(header, equals_any(labels.deadstock_name_labels))
    stock_col = find_column(header, equals_any(labels.deadstock_stock_labels))
    expiry_col = find_column(header, equals_any(labels.deadstock_expiry_labels))
    price_col = find_column(header, equals_any(labels.deadstock_price_labels))
    if name_col == MISSING_COLUMN:
        return None

    records: list[DeadstockRecord] = []
    for row in rows[header_idx + 1 :]:
        raw_name = cell_at(row, name_col)
        if not raw_name.strip():
            continue
        records.append(
            DeadstockRecord(
                name=raw_name,
                normalized_name=normalize_name(raw_name),
                stock=_read_quantity(row, stock_col) or 0.0,
                expiry=cell_at(row, expiry_col),
                price=_read_quantity(row, price_col) or 0.0,
            )
        )
    return records
