from __future__ import annotations

from sheetstage.models.sheet import ColumnType
from sheetstage.schema.layout import MAX_WIDTH, MIN_WIDTHS, estimate_width


def test_type_floor_applies_for_short_content():
    assert estimate_width("id", ["1", "2"], ColumnType.NUMBER) == MIN_WIDTHS[ColumnType.NUMBER]
    assert estimate_width("ok", ["y"], ColumnType.BOOLEAN) == 80
    assert estimate_width("e", ["a@b.co"], ColumnType.EMAIL) == 200


def test_header_width_dominates():
    title = "a" * 20  # 20*8+24 = 184
    assert estimate_width(title, ["x"], ColumnType.TEXT) == 184


def test_content_width_dominates():
    value = "x" * 30  # 30*6+24 = 204
    assert estimate_width("t", [value], ColumnType.TEXT) == 204


def test_width_is_capped():
    assert estimate_width("t", ["x" * 500], ColumnType.TEXT) == MAX_WIDTH
    assert estimate_width("h" * 100, [], ColumnType.TEXT) == MAX_WIDTH


def test_empty_values_do_not_count():
    assert estimate_width("t", [None, "", "  "], ColumnType.TEXT) == 100
