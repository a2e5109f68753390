"""Line-range replacement engine.

This module applies line-addressed edits to file text and prepares the
before/after pairs shown to the user for confirmation. All line numbers are
1-indexed and inclusive; list indices are derived as ``line - 1``.

Invalid requests never raise: an out-of-range edit leaves the text unchanged,
so callers that need to know whether an edit happened compare input and output.
"""

import logging
from collections.abc import Iterable, Sequence

from code_fix_engine.constants import (
    ANCHOR_LINE_SIMILARITY,
    ANCHOR_PREFIX_LENGTH,
    MATCH_SIMILARITY_THRESHOLD,
    RELEVANT_PORTION_PADDING,
    RUNAWAY_RATIO,
    WHOLE_FILE_RATIO,
)
from code_fix_engine.core.models import CodeFix, CodeReplacement
from code_fix_engine.utils.text import line_similarity, split_lines

logger = logging.getLogger(__name__)

# Declaration keywords used to anchor an echoed file when no line matches directly
STRUCTURAL_KEYWORDS: tuple[str, ...] = ("const ", "function ", "class ", "def ")


def replace_lines(file_text: str, start_line: int, end_line: int, new_code: str) -> str:
    """Replace lines ``start_line``..``end_line`` with ``new_code``.

    Args:
        file_text: Current file content.
        start_line: First line to replace (1-indexed).
        end_line: Last line to replace (1-indexed, inclusive).
        new_code: Replacement text, possibly spanning several lines.

    Returns:
        The new file content, or ``file_text`` unchanged when the range is invalid.

    Example:
        >>> replace_lines("line 1\\nline 2\\nline 3\\nline 4\\nline 5", 2, 4, "replacement")
        'line 1\\nreplacement\\nline 5'
    """
    lines = split_lines(file_text)

    if start_line < 1 or end_line < 1 or end_line > len(lines):
        logger.warning(
            f"Invalid line range for replacement: {start_line}-{end_line} "
            f"(file has {len(lines)} lines)"
        )
        return file_text

    if start_line > end_line:
        logger.warning(f"Start line {start_line} is greater than end line {end_line}")
        return file_text

    start_index = start_line - 1
    end_index = end_line - 1
    result = [*lines[:start_index], *split_lines(new_code), *lines[end_index + 1 :]]
    return "\n".join(result)


def apply_multiple_replacements(file_text: str, replacements: Iterable[CodeReplacement]) -> str:
    """Apply a batch of replacements from the bottom of the file to the top.

    Each edit is made while every line above it still has its original number,
    so the result does not depend on the order of ``replacements``. Overlapping
    replacements are not detected here; see :func:`validate_no_overlaps`.
    """
    ordered = sorted(replacements, key=lambda r: r.start_line, reverse=True)
    result = file_text
    for replacement in ordered:
        result = replace_lines(
            result, replacement.start_line, replacement.end_line, replacement.new_code
        )
    return result


def extract_original_code(file_text: str, start_line: int, end_line: int) -> str:
    """Return the current text of a line span.

    ``end_line`` is clamped to the last line; an out-of-range ``start_line``
    yields an empty string.
    """
    lines = split_lines(file_text)
    if start_line < 1 or end_line < 1 or start_line > len(lines):
        return ""

    end_index = min(end_line, len(lines)) - 1
    return "\n".join(lines[start_line - 1 : end_index + 1])


def _find_anchor(
    response_lines: Sequence[str], original_lines: Sequence[str], match_threshold: float
) -> int:
    first_original = original_lines[0]
    prefix = first_original.strip()[:ANCHOR_PREFIX_LENGTH]

    for index, line in enumerate(response_lines):
        if prefix in line.strip():
            return index
        if line_similarity(line, first_original) > ANCHOR_LINE_SIMILARITY:
            return index

    keywords = [kw for kw in STRUCTURAL_KEYWORDS if kw in first_original]
    if not keywords:
        return -1

    leading_lines = original_lines[:3]
    for index, line in enumerate(response_lines):
        if not any(kw in line for kw in keywords):
            continue
        matches = sum(
            1
            for offset, original in enumerate(leading_lines)
            if index + offset < len(response_lines)
            and line_similarity(response_lines[index + offset], original) > match_threshold
        )
        if matches >= 2:
            return index

    return -1


def extract_relevant_portion(
    full_response: str,
    original_selection: str,
    expected_lines: int,
    match_threshold: float = MATCH_SIMILARITY_THRESHOLD,
) -> str | None:
    """Cut the selected region out of code that echoes a whole file.

    The start of the selection is located in ``full_response`` first by a prefix
    of its first non-blank line (or a close line match), then by a shared
    declaration keyword with at least two of the first three lines scoring above
    ``match_threshold``. A window of ``expected_lines`` plus a little padding is
    taken from there.

    Returns:
        The extracted portion, or ``None`` when no anchor is found.
    """
    response_lines = split_lines(full_response)
    original_lines = [line for line in split_lines(original_selection) if line.strip()]
    if not original_lines:
        return None

    start_index = _find_anchor(response_lines, original_lines, match_threshold)
    if start_index < 0:
        return None

    end_index = min(start_index + expected_lines + RELEVANT_PORTION_PADDING, len(response_lines))
    extracted = "\n".join(response_lines[start_index:end_index])
    return extracted if extracted.strip() else None


def _guard_runaway(
    replacement: CodeReplacement,
    original_code: str,
    file_line_count: int,
    runaway_ratio: float,
    whole_file_ratio: float,
    match_threshold: float,
) -> str:
    new_code = replacement.new_code
    span = replacement.span
    new_line_count = len(split_lines(new_code))

    if new_line_count <= span * runaway_ratio:
        return new_code

    logger.warning(f"Replacement has {new_line_count} lines for a {span} line selection")
    if new_line_count < file_line_count * whole_file_ratio:
        return new_code

    logger.warning("Replacement looks like the entire file, extracting the relevant portion")
    extracted = extract_relevant_portion(new_code, original_code, span, match_threshold)
    if extracted is None:
        logger.error(
            f"Could not extract relevant portion for lines "
            f"{replacement.start_line}-{replacement.end_line}, skipping this fix"
        )
        return original_code
    return extracted


def prepare_code_fixes(
    file_text: str,
    replacements: Iterable[CodeReplacement],
    runaway_ratio: float = RUNAWAY_RATIO,
    whole_file_ratio: float = WHOLE_FILE_RATIO,
    match_threshold: float = MATCH_SIMILARITY_THRESHOLD,
) -> list[CodeFix]:
    """Pair each replacement with the code it removes, for preview.

    Oversized replacement code that covers most of the file is cut down to the
    relevant portion, or neutralized when that fails. Fixes that would change
    nothing (equal after trimming, or both empty) are dropped, and so are fixes
    whose lines fall outside the file.

    Args:
        file_text: Current file content.
        replacements: Proposed edits.
        runaway_ratio: Replacement code longer than this many times the span is
            suspect.
        whole_file_ratio: Suspect code at least this share of the file's lines is
            treated as an echoed file.
        match_threshold: Line similarity needed when anchoring an echoed file by
            its structure.

    Returns:
        Fixes in input order.
    """
    file_line_count = len(split_lines(file_text))
    fixes = []

    for replacement in replacements:
        if not 1 <= replacement.start_line <= replacement.end_line <= file_line_count:
            logger.warning(
                f"Dropping fix for lines {replacement.start_line}-{replacement.end_line}: "
                f"file has {file_line_count} lines"
            )
            continue
        original_code = extract_original_code(
            file_text, replacement.start_line, replacement.end_line
        )
        new_code = _guard_runaway(
            replacement,
            original_code,
            file_line_count,
            runaway_ratio,
            whole_file_ratio,
            match_threshold,
        )
        if original_code.strip() == new_code.strip():
            logger.debug(
                f"Dropping no-op fix for lines {replacement.start_line}-{replacement.end_line}"
            )
            continue
        fixes.append(
            CodeFix(
                start_line=replacement.start_line,
                end_line=replacement.end_line,
                original_code=original_code,
                new_code=new_code,
            )
        )

    return fixes


def validate_no_overlaps(replacements: Iterable[CodeReplacement]) -> bool:
    """Return ``True`` when no two replacements share a line."""
    ordered = sorted(replacements, key=lambda r: r.start_line)
    return all(
        current.end_line < following.start_line
        for current, following in zip(ordered, ordered[1:])
    )


def merge_overlapping_replacements(
    replacements: Sequence[CodeReplacement],
) -> list[CodeReplacement]:
    """Collapse overlapping replacements into one per overlapping run.

    Merged entries cover the union of the overlapping spans and carry the code
    of whichever replacement came later in ``replacements``.
    """
    if len(replacements) <= 1:
        return list(replacements)

    ordered = sorted(enumerate(replacements), key=lambda item: item[1].start_line)
    merged: list[tuple[int, CodeReplacement]] = [ordered[0]]

    for position, current in ordered[1:]:
        last_position, last = merged[-1]
        if current.start_line > last.end_line:
            merged.append((position, current))
            continue

        newest = current if position > last_position else last
        combined = CodeReplacement(
            start_line=min(last.start_line, current.start_line),
            end_line=max(last.end_line, current.end_line),
            new_code=newest.new_code,
        )
        merged[-1] = (max(position, last_position), combined)
        logger.debug(
            f"Merged overlapping replacement into lines {combined.start_line}-{combined.end_line}"
        )

    return [replacement for _, replacement in merged]
