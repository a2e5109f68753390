"""Test line reference parsing and selection-relative remapping."""

import pytest

from code_fix_engine.core.models import LineReference
from code_fix_engine.extraction.line_references import (
    convert_relative_to_absolute,
    extract_line_references,
    nearest_preceding_reference,
    scan_line_references,
)


class TestExtractLineReferences:
    """Test the reference notations recognized in prose."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Update lines 5-10 as shown.", (5, 10)),
            ("Update lines 4–6 as shown.", (4, 6)),
            ("Update lines 4—6 as shown.", (4, 6)),
            ("Update lines 3 to 7 as shown.", (3, 7)),
            ("Update lines 3 through 7 as shown.", (3, 7)),
            ("Update line 3-4 as shown.", (3, 4)),
            ("See L5-L10.", (5, 10)),
            ("See L5-10.", (5, 10)),
            ("LINES 2-3 need work.", (2, 3)),
            ("The bug is on line 7.", (7, 7)),
        ],
    )
    def test_notations(self, text: str, expected: tuple[int, int]) -> None:
        assert [ref.as_range() for ref in extract_line_references(text)] == [expected]

    def test_sorted_and_unique(self) -> None:
        text = "See line 12, then lines 2-3, and line 12 again."

        assert extract_line_references(text) == [LineReference(2, 3), LineReference(12, 12)]

    def test_bare_line_inside_range_dropped(self) -> None:
        text = "Lines 5-10 are affected; line 7 is the worst."

        assert extract_line_references(text) == [LineReference(5, 10)]

    def test_reversed_range_ignored(self) -> None:
        assert extract_line_references("lines 10-5") == []

    def test_line_zero_ignored(self) -> None:
        assert extract_line_references("line 0 and lines 0-2") == []

    def test_no_references(self) -> None:
        assert extract_line_references("Use a constant instead.") == []


def test_scan_keeps_offsets() -> None:
    """Test every mention carries the offset where it appears."""
    text = "First lines 2-3, then line 9."

    located = scan_line_references(text)

    assert [(item.offset, item.reference.as_range()) for item in located] == [
        (text.index("lines 2-3"), (2, 3)),
        (text.index("line 9"), (9, 9)),
    ]


class TestNearestPrecedingReference:
    """Test selection of the last mention before a position."""

    TEXT = "Fix lines 2-3 first, then line 9 at the end."

    def test_latest_mention_wins(self) -> None:
        position = self.TEXT.index("at the end")

        assert nearest_preceding_reference(self.TEXT, position) == LineReference(9, 9)

    def test_later_mentions_ignored(self) -> None:
        position = self.TEXT.index("then")

        assert nearest_preceding_reference(self.TEXT, position) == LineReference(2, 3)

    def test_nothing_before_position(self) -> None:
        assert nearest_preceding_reference(self.TEXT, 0) is None


class TestConvertRelativeToAbsolute:
    """Test remapping of selection-relative references."""

    SELECTION = LineReference(10, 20)

    def test_relative_reference_shifted(self) -> None:
        result = convert_relative_to_absolute(LineReference(1, 3), self.SELECTION)

        assert result == LineReference(10, 12)

    def test_reference_beyond_selection_length_kept(self) -> None:
        assert convert_relative_to_absolute(LineReference(12, 14), self.SELECTION) == (
            LineReference(12, 14)
        )
        assert convert_relative_to_absolute(LineReference(1, 15), self.SELECTION) == (
            LineReference(1, 15)
        )

    def test_selection_at_top_of_file_kept(self) -> None:
        assert convert_relative_to_absolute(LineReference(5, 5), LineReference(1, 50)) == (
            LineReference(5, 5)
        )

    def test_explicit_selection_length(self) -> None:
        result = convert_relative_to_absolute(LineReference(2, 3), self.SELECTION, 2)

        assert result == LineReference(2, 3)

    def test_end_clamped_to_selection(self) -> None:
        result = convert_relative_to_absolute(LineReference(1, 5), LineReference(10, 12), 10)

        assert result == LineReference(10, 12)
