"""Code block extraction from AI responses.

This package provides:
- Code block extraction and line-range resolution
- Line reference parsing from prose, with selection-relative remapping
- Line-number prefix and editorial comment stripping
"""

from code_fix_engine.extraction.code_blocks import (
    extract_all_code_blocks,
    extract_code_blocks_with_line_info,
    find_best_matching_range,
)
from code_fix_engine.extraction.line_numbers import (
    LineNumberStyle,
    add_line_numbers,
    detect_line_number_style,
    has_line_numbers,
    strip_explanatory_comments,
    strip_line_numbers,
)
from code_fix_engine.extraction.line_references import (
    convert_relative_to_absolute,
    extract_line_references,
)

__all__ = [
    "LineNumberStyle",
    "add_line_numbers",
    "convert_relative_to_absolute",
    "detect_line_number_style",
    "extract_all_code_blocks",
    "extract_code_blocks_with_line_info",
    "extract_line_references",
    "find_best_matching_range",
    "has_line_numbers",
    "strip_explanatory_comments",
    "strip_line_numbers",
]
