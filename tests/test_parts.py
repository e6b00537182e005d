from __future__ import annotations

import pytest

from lyricer.parts.colors import DEFAULT_COLOR, EMPTY_COLORS, PartColorTable, load_color_table, resolve_color
from lyricer.parts.layout import group_in_pairs


class TestResolveColor:
    def test_empty_table_falls_back(self):
        assert resolve_color(EMPTY_COLORS, "Alice") == DEFAULT_COLOR
        assert resolve_color(None, "Alice") == DEFAULT_COLOR

    def test_known_and_unknown_labels(self):
        table = PartColorTable({"A": "red", "B": "blue"})
        assert resolve_color(table, "A") == "red"
        assert resolve_color(table, "B") == "blue"
        assert resolve_color(table, "C") == DEFAULT_COLOR

    @pytest.mark.parametrize("label", ["a", "A ", " A", "Ａ"])
    def test_exact_match_only(self, label):
        table = PartColorTable({"A": "red"})
        assert resolve_color(table, label) == DEFAULT_COLOR

    def test_table_is_read_only(self):
        src = {"A": "red"}
        table = PartColorTable(src)
        src["A"] = "green"
        assert resolve_color(table, "A") == "red"
        with pytest.raises(TypeError):
            table.entries["A"] = "blue"  # type: ignore[index]


class TestLoadColorTable:
    def test_load(self):
        table = load_color_table(
            {"color": [{"part": "Alice", "color": "text-red-500"}, {"part": "Bob", "color": "#00f"}]}
        )
        assert dict(table.entries) == {"Alice": "text-red-500", "Bob": "#00f"}

    def test_bad_entries_skipped_and_later_entry_wins(self):
        table = load_color_table(
            {
                "color": [
                    {"part": "Alice", "color": "red"},
                    {"part": "Bob"},
                    {"color": "green"},
                    {"part": 1, "color": "green"},
                    "junk",
                    {"part": "Alice", "color": "pink"},
                ]
            }
        )
        assert dict(table.entries) == {"Alice": "pink"}

    @pytest.mark.parametrize("raw", [None, {}, [], {"color": {}}, "red"])
    def test_missing_source_is_empty(self, raw):
        table = load_color_table(raw)
        assert len(table) == 0
        assert resolve_color(table, "Alice") == DEFAULT_COLOR


@pytest.mark.parametrize(
    "parts, expected",
    [
        ([], []),
        (["A"], [["A"]]),
        (["A", "B"], [["A", "B"]]),
        (["A", "B", "C"], [["A", "B"], ["C"]]),
        (("A", "B", "C", "D", "E"), [["A", "B"], ["C", "D"], ["E"]]),
    ],
)
def test_group_in_pairs(parts, expected):
    assert group_in_pairs(parts) == expected
