"""pytest 共享 fixture 与配置。"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# 保证项目根在 sys.path 中，便于导入 core / app / domain / models
_root = Path(__file__).resolve().parent.parent
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from models.schemas import ExtractionSection, IngestSection  # noqa: E402


def usage_row(name: str, usage: str = "", *, col20: str = "", width: int = 21) -> list[str]:
    """构造使用实绩数据行：第 1 列薬品名，第 2 列使用量，第 20 列可选。"""
    row = [""] * width
    row[0] = name
    row[1] = usage
    row[20] = col20
    return row


def _quote(cell: str) -> str:
    return f'"{cell}"' if "," in cell else cell


def to_csv_bytes(rows: list[list[str]], encoding: str = "cp932") -> bytes:
    lines = [",".join(_quote(c) for c in row) for row in rows]
    return ("\r\n".join(lines) + "\r\n").encode(encoding)


@pytest.fixture
def labels() -> ExtractionSection:
    return ExtractionSection()


@pytest.fixture
def ingest_settings() -> IngestSection:
    return IngestSection()


@pytest.fixture
def zaiko_bytes() -> bytes:
    """店舗名「佐野店」的使用实绩（cp932）。"""
    rows = [
        ["在庫分析表"],
        ["店舗名", "佐野店"],
        ["期間", "2024/01/01～2024/03/31"],
        ["薬品名", "処方数量", "レセ電コード"],
        ["アスピリン錠１００ｍｇ", "5"],
        ["ロキソニン錠６０ｍｇ", "1,200"],
        ["ムコスタ錠", "0"],
    ]
    return to_csv_bytes(rows)


@pytest.fixture
def hudo_bytes() -> bytes:
    """不动品列表（cp932）。"""
    rows = [
        ["余剰在庫一覧"],
        ["No.", "薬品名", "在庫数量", "使用期限", "薬価"],
        ["1", "ロキソニン錠60mg", "100", "2025/03", "10.1"],
        ["2", "ビオフェルミン", "20", "2025/06", "5.9"],
    ]
    return to_csv_bytes(rows)
