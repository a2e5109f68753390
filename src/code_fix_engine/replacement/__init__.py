"""Line-range replacement and fix preparation."""

from code_fix_engine.replacement.engine import (
    apply_multiple_replacements,
    extract_original_code,
    extract_relevant_portion,
    merge_overlapping_replacements,
    prepare_code_fixes,
    replace_lines,
    validate_no_overlaps,
)

__all__ = [
    "apply_multiple_replacements",
    "extract_original_code",
    "extract_relevant_portion",
    "merge_overlapping_replacements",
    "prepare_code_fixes",
    "replace_lines",
    "validate_no_overlaps",
]
