"""core.tabular 单元测试：CSV 解析、单元格取值、数字解析。"""

from __future__ import annotations

import pytest

from core.tabular import cell_at, parse_csv, parse_number


class TestParseCsv:
    def test_blank_lines_dropped(self) -> None:
        rows = parse_csv("a,b\n\n\nc\n")
        assert rows == [["a", "b"], ["c"]]

    def test_ragged_rows_kept(self) -> None:
        rows = parse_csv("No.,薬品名,在庫数\n1,アスピリン\n")
        assert [len(r) for r in rows] == [3, 2]

    def test_quoted_cells(self) -> None:
        rows = parse_csv('"ロキソニン錠,60mg","1,200"\r\n')
        assert rows == [["ロキソニン錠,60mg", "1,200"]]

    def test_empty_text(self) -> None:
        assert parse_csv("") == []


class TestCellAt:
    def test_in_range(self) -> None:
        assert cell_at(["a", "b"], 1) == "b"

    def test_out_of_range_and_negative(self) -> None:
        assert cell_at(["a"], 5) == ""
        assert cell_at(["a"], -1) == ""


class TestParseNumber:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("12", 12.0),
            (" 3.5 ", 3.5),
            ("1,200", 1200.0),
            ("12個", 12.0),
            ("-4", -4.0),
            (".5", 0.5),
        ],
    )
    def test_parses(self, raw: str, expected: float) -> None:
        assert parse_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "  ", "abc", "-", "."])
    def test_unparseable(self, raw: str | None) -> None:
        assert parse_number(raw) is None
