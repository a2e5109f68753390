"""Test overlap detection between replacements."""

import pytest

from code_fix_engine.analysis.overlap_detector import Overlap, OverlapDetector
from code_fix_engine.core.models import CodeReplacement


def test_detect_exact_overlap() -> None:
    """Test detection of identical line ranges."""
    detector = OverlapDetector()

    first = CodeReplacement(start_line=10, end_line=15, new_code="content1")
    second = CodeReplacement(start_line=10, end_line=15, new_code="content2")

    assert detector.detect_overlap(first, second) == "exact"


@pytest.mark.parametrize(
    ("first_range", "second_range", "expected"),
    [
        ((10, 15), (11, 15), "major"),
        ((10, 17), (12, 19), "partial"),
        ((10, 15), (13, 18), "minor"),
        ((10, 15), (15, 20), "minor"),
    ],
)
def test_detect_overlap_kinds(
    first_range: tuple[int, int], second_range: tuple[int, int], expected: str
) -> None:
    """Test classification by share of the combined span."""
    detector = OverlapDetector()
    first = CodeReplacement(*first_range, new_code="a")
    second = CodeReplacement(*second_range, new_code="b")

    assert detector.detect_overlap(first, second) == expected


def test_detect_no_overlap() -> None:
    """Test adjacent ranges do not overlap."""
    detector = OverlapDetector()

    first = CodeReplacement(start_line=10, end_line=15, new_code="a")
    second = CodeReplacement(start_line=16, end_line=20, new_code="b")

    assert detector.detect_overlap(first, second) is None
    assert detector.overlap_percentage(first, second) == 0.0


def test_overlap_percentage() -> None:
    """Test shared lines over combined span."""
    detector = OverlapDetector()

    first = CodeReplacement(start_line=10, end_line=17, new_code="a")
    second = CodeReplacement(start_line=12, end_line=19, new_code="b")

    assert detector.overlap_percentage(first, second) == pytest.approx(60.0)
    assert detector.overlap_percentage(second, first) == pytest.approx(60.0)


def test_is_duplicate_ignores_whitespace() -> None:
    """Test duplicate edits compare normalized code on the same range."""
    detector = OverlapDetector()

    first = CodeReplacement(start_line=1, end_line=3, new_code="a = 1\n\nb = 2\n")
    second = CodeReplacement(start_line=1, end_line=3, new_code="    a = 1\n    b = 2")
    shifted = CodeReplacement(start_line=2, end_line=4, new_code="a = 1\nb = 2")

    assert detector.is_duplicate(first, second)
    assert not detector.is_duplicate(first, shifted)


def test_find_overlaps_ordered_by_position() -> None:
    """Test overlapping pairs are reported earliest range first."""
    detector = OverlapDetector()
    early = CodeReplacement(start_line=10, end_line=15, new_code="a")
    late = CodeReplacement(start_line=13, end_line=18, new_code="b")
    apart = CodeReplacement(start_line=30, end_line=31, new_code="c")

    overlaps = detector.find_overlaps([late, apart, early])

    assert len(overlaps) == 1
    overlap = overlaps[0]
    assert isinstance(overlap, Overlap)
    assert (overlap.first, overlap.second, overlap.kind) == (early, late, "minor")
    assert overlap.percentage == pytest.approx(100 / 3)


def test_find_overlaps_none() -> None:
    """Test a disjoint batch yields no overlaps."""
    detector = OverlapDetector()
    batch = [
        CodeReplacement(start_line=1, end_line=2, new_code="a"),
        CodeReplacement(start_line=3, end_line=4, new_code="b"),
    ]

    assert detector.find_overlaps(batch) == []


def test_summarize() -> None:
    """Test summary counts overlaps by kind and duplicates."""
    detector = OverlapDetector()
    batch = [
        CodeReplacement(start_line=1, end_line=3, new_code="a = 1\n"),
        CodeReplacement(start_line=1, end_line=3, new_code="  a = 1"),
        CodeReplacement(start_line=2, end_line=4, new_code="b"),
    ]

    summary = detector.summarize(batch)

    assert summary == {
        "total_replacements": 3,
        "overlap_count": 3,
        "overlap_kinds": {"exact": 1, "partial": 2},
        "duplicate_count": 1,
    }
