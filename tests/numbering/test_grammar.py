"""
Unit Tests for the Requirement Number Grammar

Tests branch selection, canonical sub-parts, ordering and the structure
helpers built on top of parse_requirement_number().
"""

import re

import pytest

from advancement_toolkit.core.models import NumberNotation
from advancement_toolkit.numbering import (
    compare_requirement_numbers,
    option_letter,
    parent_number,
    parse_requirement_number,
    requirement_sort_key,
    to_display_format,
)


class TestStandardNotation:
    """Tests for "1", "1a", "7b8" style numbers."""

    @pytest.mark.parametrize("raw", ["1", "12", "1a", "1A", "7b8", "10c", "3z12", "007"])
    def test_is_parent_when_standard_then_matches_bare_digits(self, raw):
        """is_parent holds exactly for bare digit strings."""
        number = parse_requirement_number(raw)
        assert number.notation is NumberNotation.STANDARD
        assert number.is_parent == bool(re.fullmatch(r"\d+", raw))

    def test_parse_when_letter_and_digits_then_letter_first(self):
        """Sub-parts are the lowercased letter then the digit run."""
        number = parse_requirement_number("7B8")
        assert number.group == 7
        assert number.sub_parts == ("b", "8")
        assert number.depth == 3

    def test_parse_when_uppercase_letter_then_same_as_lowercase(self):
        """"1A" and "1a" canonicalize identically in the standard branch."""
        assert parse_requirement_number("1A").sub_parts == parse_requirement_number("1a").sub_parts

    def test_parse_when_surrounding_whitespace_then_stripped(self):
        number = parse_requirement_number("  4b ")
        assert number.raw == "4b"
        assert number.sub_parts == ("b",)


class TestParentheticalNotation:
    """Tests for "6A(a)(1)" style numbers."""

    def test_parse_when_option_and_groups_then_verbatim_sub_parts(self):
        """Option letter then each group's content, case preserved."""
        number = parse_requirement_number("6A(a)(1)")
        assert number.notation is NumberNotation.PARENTHETICAL
        assert number.group == 6
        assert number.sub_parts == ("A", "a", "1")
        assert number.depth == 4

    def test_parse_when_groups_only_then_contents_in_order(self):
        number = parse_requirement_number("9(2)(c)")
        assert number.sub_parts == ("2", "c")

    def test_parse_when_option_letter_alone_then_standard_branch_wins(self):
        """"6A" is a standard number; the two grammars are distinct namespaces."""
        assert parse_requirement_number("6A").sub_parts == ("a",)
        assert parse_requirement_number("6A(a)").sub_parts == ("A", "a")


class TestFallbackNotation:
    """Tests for the best-effort branch."""

    def test_parse_when_mixed_notation_then_best_effort(self):
        """"9b(2)" matches neither grammar; separators are kept as sub-parts."""
        number = parse_requirement_number("9b(2)")
        assert number.is_best_effort
        assert number.group == 9
        assert number.sub_parts == ("b", "(", "2", ")")

    def test_parse_when_trailing_separator_then_not_parent(self):
        """"7." is group 7 with one sub-part, never a bare group number."""
        number = parse_requirement_number("7.")
        assert number.is_best_effort
        assert number.group == 7
        assert number.sub_parts == (".",)
        assert not number.is_parent

    @pytest.mark.parametrize("raw", ["", "   ", "3)", "§"])
    def test_parse_when_nothing_recognisable_then_not_parent(self, raw):
        """Separators or an empty string never make a parent."""
        number = parse_requirement_number(raw)
        assert number.is_best_effort
        assert not number.is_parent

    def test_parse_when_nested_parentheses_then_best_effort(self):
        """Parenthetical groups do not nest; "6A(a(1))" falls back."""
        number = parse_requirement_number("6A(a(1))")
        assert number.is_best_effort
        assert number.sub_parts == ("A", "(", "a", "(", "1", ")", ")")

    def test_parse_when_no_leading_digits_then_group_zero(self):
        number = parse_requirement_number("MB")
        assert number.is_best_effort
        assert number.group == 0
        assert number.sub_parts == ("M", "B")

    @pytest.mark.parametrize("raw", ["", "   ", "1.2.3", "()", "§4", "4 b", "x(1"])
    def test_parse_when_garbage_then_never_raises(self, raw):
        """The grammar is total."""
        number = parse_requirement_number(raw)
        assert number.group >= 0

    def test_parse_when_called_twice_then_same_instance(self):
        """Parses are memoised."""
        assert parse_requirement_number("8c") is parse_requirement_number("8c")


class TestOrdering:
    """Tests for sort keys and comparison."""

    def test_sort_when_mixed_groups_then_numeric_group_order(self):
        raws = ["10", "2b", "2", "1a", "2a"]
        assert sorted(raws, key=requirement_sort_key) == ["1a", "2", "2a", "2b", "10"]

    def test_compare_when_case_differs_then_equal(self):
        assert compare_requirement_numbers("6A(a)", "6A(A)") == 0

    def test_compare_when_groups_differ_then_group_decides(self):
        assert compare_requirement_numbers("9", "10") < 0
        assert compare_requirement_numbers("10", "9") > 0


class TestHelpers:
    """Tests for parent_number(), option_letter() and to_display_format()."""

    @pytest.mark.parametrize("raw, expected", [
        ("1", None),
        ("7b8", "7b"),
        ("1a", "1"),
        ("6A", "6"),
        ("6A(a)", "6A"),
        ("6A(a)(1)", "6A(a)"),
        ("9(2)", "9"),
    ])
    def test_parent_number(self, raw, expected):
        assert parent_number(raw) == expected

    def test_option_letter_when_uppercase_then_returned(self):
        assert option_letter("6B(a)") == "B"
        assert option_letter("6b") is None

    @pytest.mark.parametrize("raw, expected", [
        ("6A(a)(1)", "6Aa1"),
        ("9b(2)", "9b2"),
        ("1a", "1a"),
    ])
    def test_to_display_format(self, raw, expected):
        assert to_display_format(raw) == expected
