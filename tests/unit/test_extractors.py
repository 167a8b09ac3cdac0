"""core.extractors 单元测试：表头识别、列定位、使用量回退、不动品抽取。"""

from __future__ import annotations

from conftest import usage_row

from core.extractors import (
    MISSING_COLUMN,
    discover_store_name,
    extract_deadstock_records,
    extract_usage_records,
    resolve_usage,
)
from models.schemas import ExtractionSection


class TestDiscoverStoreName:
    def test_store_label_next_cell(self, labels: ExtractionSection) -> None:
        rows = [["在庫分析表"], ["店舗名", "佐野店"], ["薬品名", "使用量"]]
        assert discover_store_name(rows, labels) == "佐野店"

    def test_blank_next_cell_keeps_scanning(self, labels: ExtractionSection) -> None:
        rows = [["店舗", " "], ["出力店舗", "あやめ店"]]
        assert discover_store_name(rows, labels) == "あやめ店"

    def test_only_first_rows_scanned(self, labels: ExtractionSection) -> None:
        rows = [["x"]] * 5 + [["店舗名", "佐野店"]]
        assert discover_store_name(rows, labels) is None

    def test_label_in_last_cell(self, labels: ExtractionSection) -> None:
        assert discover_store_name([["店舗名"]], labels) is None


class TestUsageExtraction:
    def test_header_and_records(self, labels: ExtractionSection) -> None:
        rows = [
            ["店舗名", "佐野店"],
            ["薬品名", "処方数量", "レセ電コード"],
            ["アスピリン", "5"],
            ["", "9"],
            ["ロキソニン", "1,200"],
        ]
        result = extract_usage_records(rows, labels)
        assert result.store_name == "佐野店"
        assert result.header_row == 1
        assert result.name_column == 0
        assert result.usage_column == 1
        assert result.records is not None
        assert [(r.name, r.usage) for r in result.records] == [("アスピリン", 5.0), ("ロキソニン", 1200.0)]

    def test_header_requires_name_and_other_label(self, labels: ExtractionSection) -> None:
        rows = [
            ["薬品名", "備考"],
            ["商品名", "No."],
            ["アスピリン", "3"],
        ]
        result = extract_usage_records(rows, labels)
        assert result.header_row == 1
        # 使用量列未识别，使用回退列 20
        assert result.usage_column == labels.usage_fallback_column
        assert result.records is not None
        assert result.records[0].usage == 0

    def test_no_header_yields_none(self, labels: ExtractionSection) -> None:
        result = extract_usage_records([["a", "b"], ["c", "d"]], labels)
        assert result.records is None
        assert result.store_name is None

    def test_fallback_column_when_primary_zero(self, labels: ExtractionSection) -> None:
        rows = [
            ["薬品名", "使用量"],
            usage_row("アスピリン", "0", col20="12"),
        ]
        result = extract_usage_records(rows, labels)
        assert result.records is not None
        assert result.records[0].usage == 12

    def test_fallback_column_when_primary_unparseable(self, labels: ExtractionSection) -> None:
        rows = [["薬品名", "使用量"], usage_row("アスピリン", "-", col20="7.5")]
        result = extract_usage_records(rows, labels)
        assert result.records is not None
        assert result.records[0].usage == 7.5

    def test_fallback_zero_does_not_override(self, labels: ExtractionSection) -> None:
        rows = [["薬品名", "使用量"], usage_row("アスピリン", "4", col20="0")]
        result = extract_usage_records(rows, labels)
        assert result.records is not None
        assert result.records[0].usage == 4

    def test_fallback_column_configurable(self) -> None:
        labels = ExtractionSection(usage_fallback_column=2)
        rows = [["薬品名", "使用量"], ["アスピリン", "0", "8"]]
        result = extract_usage_records(rows, labels)
        assert result.records is not None
        assert result.records[0].usage == 8

    def test_normalized_name(self, labels: ExtractionSection) -> None:
        rows = [["薬品名", "使用量"], ["ロキソニン錠６０ｍｇ", "1"]]
        result = extract_usage_records(rows, labels)
        assert result.records is not None
        assert result.records[0].normalized_name == "ロキソニン錠60mg"

    def test_deterministic(self, labels: ExtractionSection) -> None:
        rows = [["薬品名", "使用量"], ["アスピリン", "1"], ["ロキソニン", "2"]]
        first = extract_usage_records(rows, labels)
        second = extract_usage_records(rows, labels)
        assert first.records is not None and second.records is not None
        assert [r.model_dump() for r in first.records] == [r.model_dump() for r in second.records]


def test_resolve_usage_on_fallback_column_itself() -> None:
    row = usage_row("x", col20="0")
    assert resolve_usage(row, 20, 20) == 0


class TestDeadstockExtraction:
    def test_records(self, labels: ExtractionSection) -> None:
        rows = [
            ["余剰在庫一覧"],
            ["No.", "薬品名", "在庫数量", "使用期限", "薬価"],
            ["1", "アスピリン", "10", "2025/03", "100"],
            ["2", "", "5", "", "1"],
            ["3", "ロキソニン", "abc", "2025/06", "10.1"],
        ]
        records = extract_deadstock_records(rows, labels)
        assert records is not None
        assert len(records) == 2
        assert records[0].name == "アスピリン"
        assert records[0].stock == 10
        assert records[0].expiry == "2025/03"
        assert records[0].price == 100
        assert records[1].stock == 0
        assert records[1].price == 10.1

    def test_header_first_cell_no_without_dot(self, labels: ExtractionSection) -> None:
        rows = [["No", "薬品名", "在庫数"], ["1", "アスピリン", "3"]]
        records = extract_deadstock_records(rows, labels)
        assert records is not None
        assert records[0].stock == 3

    def test_missing_optional_columns(self, labels: ExtractionSection) -> None:
        rows = [["No.", "薬品名"], ["1", "アスピリン"]]
        records = extract_deadstock_records(rows, labels)
        assert records is not None
        assert records[0].stock == 0
        assert records[0].price == 0
        assert records[0].expiry == ""

    def test_exact_label_only(self, labels: ExtractionSection) -> None:
        # 「薬品名称」は完全一致しないため品名列なし
        rows = [["No.", "薬品名称"], ["1", "アスピリン"]]
        assert extract_deadstock_records(rows, labels) is None

    def test_no_header(self, labels: ExtractionSection) -> None:
        assert extract_deadstock_records([["番号", "薬品名"], ["1", "x"]], labels) is None

    def test_name_kept_as_in_source(self, labels: ExtractionSection) -> None:
        rows = [["No.", "薬品名"], ["1", " アスピリン錠　１００ｍｇ "]]
        records = extract_deadstock_records(rows, labels)
        assert records is not None
        assert records[0].name == " アスピリン錠　１００ｍｇ "
        assert records[0].normalized_name == "アスピリン錠100mg"

    def test_short_rows(self, labels: ExtractionSection) -> None:
        rows = [["No.", "在庫数", "薬価", "薬品名"], ["1", "2"]]
        assert extract_deadstock_records(rows, labels) == []


def test_missing_column_constant() -> None:
    assert MISSING_COLUMN == -1
