"""Utility functions for text, selections and file I/O."""

from code_fix_engine.utils.file_io import atomic_write, read_text
from code_fix_engine.utils.selection import (
    extract_selected_text,
    is_valid_selection,
    selection_to_range,
)
from code_fix_engine.utils.text import (
    char_jaccard,
    count_lines,
    line_similarity,
    normalize_content,
    split_lines,
    word_overlap_ratio,
)

__all__ = [
    "atomic_write",
    "char_jaccard",
    "count_lines",
    "extract_selected_text",
    "is_valid_selection",
    "line_similarity",
    "normalize_content",
    "read_text",
    "selection_to_range",
    "split_lines",
    "word_overlap_ratio",
]
