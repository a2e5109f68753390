"""Editor selection helpers.

Editors report selections with 1-indexed, inclusive line numbers. These helpers
turn a selection into a :class:`LineReference` and read the selected text.
"""

from typing import Protocol

from code_fix_engine.core.models import LineReference
from code_fix_engine.utils.text import count_lines, split_lines

__all__ = [
    "EditorSelection",
    "count_lines",
    "extract_selected_text",
    "is_valid_selection",
    "selection_to_range",
]


class EditorSelection(Protocol):
    """Anything exposing editor-style selection line numbers."""

    start_line_number: int
    end_line_number: int


def selection_to_range(selection: EditorSelection | None) -> LineReference | None:
    """Convert an editor selection to a line range, ``None`` when nothing is selected."""
    if selection is None:
        return None
    return LineReference(
        start_line=selection.start_line_number, end_line=selection.end_line_number
    )


def extract_selected_text(code: str, start_line: int, end_line: int) -> str:
    """Return lines ``start_line``..``end_line`` (1-indexed, inclusive) of ``code``.

    Example:
        >>> extract_selected_text("a\\nb\\nc\\nd", 2, 3)
        'b\\nc'
    """
    return "\n".join(split_lines(code)[max(start_line - 1, 0) : max(end_line, 0)])


def is_valid_selection(start_line: int, end_line: int, selected_text: str) -> bool:
    """Tell whether a selection can be sent for review.

    The bounds must be ordered and non-negative, and the selected text must hold
    something besides whitespace.
    """
    if start_line < 0 or end_line < 0 or start_line > end_line:
        return False
    return bool(selected_text.strip())
