"""Overlap detection between replacements.

This module provides the OverlapDetector class that analyzes a batch of
replacements for shared lines and classifies each overlap by its extent, so a
rejected batch can be explained to the user.
"""

from dataclasses import dataclass
from typing import Any

from ..core.models import CodeReplacement
from ..utils.text import normalize_content


@dataclass(frozen=True, slots=True)
class Overlap:
    """Two replacements of a batch that touch the same lines.

    Attributes:
        first: Replacement starting earlier in the file.
        second: Replacement starting later in the file.
        kind: One of ``exact``, ``major``, ``partial`` or ``minor``.
        percentage: Shared lines as a share of the combined span, 0-100.
    """

    first: CodeReplacement
    second: CodeReplacement
    kind: str
    percentage: float


class OverlapDetector:
    """Detects and classifies overlaps between replacements."""

    def overlap_percentage(self, first: CodeReplacement, second: CodeReplacement) -> float:
        """Shared lines of two replacements as a percentage of their combined span."""
        if first.end_line < second.start_line or second.end_line < first.start_line:
            return 0.0

        overlap_size = min(first.end_line, second.end_line) - max(
            first.start_line, second.start_line
        ) + 1
        total_size = max(first.end_line, second.end_line) - min(
            first.start_line, second.start_line
        ) + 1

        # Conservative default for degenerate ranges: avoid division by zero
        if total_size <= 0:
            return 100.0

        return (overlap_size / total_size) * 100

    def detect_overlap(
        self,
        first: CodeReplacement,
        second: CodeReplacement,
    ) -> str | None:
        """Classify the overlap between two replacements, ``None`` when disjoint."""
        if first.start_line == second.start_line and first.end_line == second.end_line:
            return "exact"

        if first.end_line < second.start_line or second.end_line < first.start_line:
            return None

        percentage = self.overlap_percentage(first, second)
        if percentage >= 80:
            return "major"
        elif percentage >= 50:
            return "partial"
        else:
            return "minor"

    def is_duplicate(self, first: CodeReplacement, second: CodeReplacement) -> bool:
        """Check if two replacements make the same edit, ignoring blank lines and indentation."""
        return (
            first.start_line == second.start_line
            and first.end_line == second.end_line
            and normalize_content(first.new_code) == normalize_content(second.new_code)
        )

    def find_overlaps(self, replacements: list[CodeReplacement]) -> list[Overlap]:
        """List every overlapping pair in a batch, ordered by position in the file."""
        ordered = sorted(replacements, key=lambda r: (r.start_line, r.end_line))
        overlaps = []

        for index, first in enumerate(ordered):
            for second in ordered[index + 1 :]:
                if second.start_line > first.end_line:
                    break
                kind = self.detect_overlap(first, second)
                if kind is not None:
                    overlaps.append(
                        Overlap(
                            first=first,
                            second=second,
                            kind=kind,
                            percentage=self.overlap_percentage(first, second),
                        )
                    )

        return overlaps

    def summarize(self, replacements: list[CodeReplacement]) -> dict[str, Any]:
        """Summarize overlaps in a batch by kind."""
        overlaps = self.find_overlaps(replacements)
        kinds: dict[str, int] = {}
        for overlap in overlaps:
            kinds[overlap.kind] = kinds.get(overlap.kind, 0) + 1

        duplicates = sum(
            1 for overlap in overlaps if self.is_duplicate(overlap.first, overlap.second)
        )

        return {
            "total_replacements": len(replacements),
            "overlap_count": len(overlaps),
            "overlap_kinds": kinds,
            "duplicate_count": duplicates,
        }
