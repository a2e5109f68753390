"""Line references mentioned in the prose of an AI response.

Recognized forms (case-insensitive):
- ``lines 5-10`` (hyphen, en dash or em dash)
- ``lines 5 to 10`` and ``lines 5 through 10``
- ``L5-L10`` and ``L5-10``
- ``line 7``, only when no extracted range already covers it
"""

import logging
import re
from dataclasses import dataclass

from code_fix_engine.core.models import LineReference

logger = logging.getLogger(__name__)

RANGE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\blines?\s+(\d+)\s*[-–—]\s*(\d+)", re.IGNORECASE),
    re.compile(r"\blines?\s+(\d+)\s+(?:to|through)\s+(\d+)", re.IGNORECASE),
    re.compile(r"\bL(\d+)\s*[-–—]\s*L?(\d+)", re.IGNORECASE),
)

SINGLE_LINE_PATTERN = re.compile(
    r"\bline\s+(\d+)(?!\d)(?!\s*(?:[-–—]|to\b|through\b))", re.IGNORECASE
)


@dataclass(frozen=True, slots=True)
class LocatedReference:
    """A line reference plus the character offset where it was mentioned."""

    offset: int
    reference: LineReference


def scan_line_references(text: str) -> list[LocatedReference]:
    """Find every line reference in ``text`` with its position.

    Ranges are collected first; a bare ``line X`` is kept only when no range
    collected so far contains ``X``. Duplicates are not removed here.
    """
    located: list[LocatedReference] = []

    for pattern in RANGE_PATTERNS:
        for match in pattern.finditer(text):
            start, end = int(match.group(1)), int(match.group(2))
            if 0 < start <= end:
                located.append(LocatedReference(match.start(), LineReference(start, end)))

    for match in SINGLE_LINE_PATTERN.finditer(text):
        line = int(match.group(1))
        if line <= 0:
            continue
        if any(
            item.reference.start_line <= line <= item.reference.end_line for item in located
        ):
            continue
        located.append(LocatedReference(match.start(), LineReference(line, line)))

    return located


def extract_line_references(text: str) -> list[LineReference]:
    """Extract unique line references from text, sorted by start line.

    Examples:
        >>> extract_line_references("See lines 5-10 and line 2.")
        [LineReference(start_line=2, end_line=2), LineReference(start_line=5, end_line=10)]
    """
    unique: dict[tuple[int, int], LineReference] = {}
    for item in scan_line_references(text):
        unique.setdefault(item.reference.as_range(), item.reference)

    return sorted(unique.values(), key=lambda ref: ref.start_line)


def nearest_preceding_reference(text: str, position: int) -> LineReference | None:
    """Return the reference mentioned last before ``position`` in ``text``."""
    located = scan_line_references(text[:position])
    if not located:
        return None
    return max(located, key=lambda item: item.offset).reference


def convert_relative_to_absolute(
    reference: LineReference,
    fallback_range: LineReference,
    selection_length: int | None = None,
) -> LineReference:
    """Map a reference counted from the top of the selection onto the file.

    A reference that fits inside the selection and starts before the selection
    does is read as relative: with lines 10-20 selected, ``lines 1-3`` becomes
    10-12. The end is clamped to the end of the selection. Anything else is
    returned unchanged.

    Small absolute line numbers near the top of a file are indistinguishable
    from relative ones and get remapped too.
    """
    if selection_length is None:
        selection_length = fallback_range.line_count

    is_relative = (
        reference.start_line <= selection_length
        and reference.end_line <= selection_length
        and reference.start_line < fallback_range.start_line
    )
    if not is_relative:
        return reference

    converted = LineReference(
        start_line=fallback_range.start_line + reference.start_line - 1,
        end_line=min(fallback_range.start_line + reference.end_line - 1, fallback_range.end_line),
    )
    logger.debug(
        f"Treating lines {reference.start_line}-{reference.end_line} as relative to "
        f"selection, resolved to {converted.start_line}-{converted.end_line}"
    )
    return converted
