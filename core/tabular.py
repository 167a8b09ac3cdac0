"""CSV 文本 -> 行列表。不补齐、不截断，不假设表头。"""

from __future__ import annotations

import csv
import io
import re

_THOUSANDS_RE = re.compile(r",")
_LEADING_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_csv(text: str, delimiter: str = ",") -> list[list[str]]:
    """按分隔符解析（支持引号），空行整行丢弃，各行长度可不同。"""
    if not text:
        return []
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    return [row for row in reader if row]


def cell_at(row: list[str], index: int) -> str:
    """取单元格；索引为负或越界时视为缺失，返回空字符串。"""
    if index < 0 or index >= len(row):
        return ""
    value = row[index]
    return "" if value is None else str(value)


def parse_number(value: str | None) -> float | None:
    """
    宽松的数字解析：去千位分隔符与首尾空白后，取开头最长的十进制数字（'12個' -> 12）。
    无法解析返回 None。
    """
    if value is None:
        return None
    s = _THOUSANDS_RE.sub("", str(value)).strip()
    if not s:
        return None
    m = _LEADING_NUMBER_RE.match(s)
    if not m:
        return None
    return float(m.group(0))
