"""Fenced code block extraction and line-range resolution.

Code blocks are pulled out of an AI response, cleaned of injected line numbers
and editorial comments, and bound to the part of the original file they are
meant to replace. The model is instructed to work on the user's selection only,
so the selection is the default target for every block.
"""

import logging
import re
from dataclasses import dataclass, replace

from code_fix_engine.constants import MATCH_SIMILARITY_THRESHOLD, MAX_LINE_NUMBER
from code_fix_engine.core.models import CodeBlock, LineReference
from code_fix_engine.extraction.line_numbers import (
    has_line_numbers,
    strip_explanatory_comments,
    strip_line_numbers,
)
from code_fix_engine.extraction.line_references import (
    convert_relative_to_absolute,
    nearest_preceding_reference,
)
from code_fix_engine.utils.text import char_jaccard

logger = logging.getLogger(__name__)

CODE_FENCE_PATTERN = re.compile(r"```([\w+#.-]*)[ \t]*\n(.*?)```", re.DOTALL)


@dataclass(frozen=True, slots=True)
class _PositionedBlock:
    offset: int
    block: CodeBlock


def clean_code_block(code: str, max_line_number: int = MAX_LINE_NUMBER) -> str:
    """Strip line numbers and editorial comments, then trailing whitespace."""
    if has_line_numbers(code, max_line_number):
        code = strip_line_numbers(code, max_line_number)
    code = strip_explanatory_comments(code)
    return code.rstrip()


def _scan_code_blocks(text: str, max_line_number: int) -> list[_PositionedBlock]:
    blocks = []
    for match in CODE_FENCE_PATTERN.finditer(text):
        code = clean_code_block(match.group(2), max_line_number)
        if not code.strip():
            logger.debug(f"Discarding empty code block at offset {match.start()}")
            continue
        blocks.append(
            _PositionedBlock(
                offset=match.start(),
                block=CodeBlock(code=code, language=match.group(1) or None),
            )
        )
    return blocks


def extract_all_code_blocks(
    text: str, max_line_number: int = MAX_LINE_NUMBER
) -> list[CodeBlock]:
    """Extract every non-empty fenced code block from ``text``.

    Args:
        text: AI response or one of its sections.
        max_line_number: Largest number read as a space-padded line prefix.

    Returns:
        Cleaned blocks in document order, without line ranges.
    """
    return [item.block for item in _scan_code_blocks(text, max_line_number)]


def extract_code_blocks_with_line_info(
    text: str,
    fallback_range: LineReference,
    max_line_number: int = MAX_LINE_NUMBER,
) -> list[CodeBlock]:
    """Extract code blocks and resolve the line range each one replaces.

    A lone block always replaces ``fallback_range``, whatever line numbers the
    prose mentions. With several blocks, each takes the line reference mentioned
    last before it (converted from selection-relative numbering when it looks
    relative), or ``fallback_range`` when there is none.

    Args:
        text: AI response or one of its sections.
        fallback_range: The user's selection.
        max_line_number: Largest number read as a space-padded line prefix.

    Returns:
        Blocks with ``line_range`` set, in document order.
    """
    positioned = _scan_code_blocks(text, max_line_number)
    if not positioned:
        return []

    if len(positioned) == 1:
        return [replace(positioned[0].block, line_range=fallback_range)]

    selection_length = fallback_range.line_count
    resolved = []
    for item in positioned:
        reference = nearest_preceding_reference(text, item.offset)
        if reference is None:
            line_range = fallback_range
        else:
            line_range = convert_relative_to_absolute(reference, fallback_range, selection_length)
        resolved.append(replace(item.block, line_range=line_range))

    logger.debug(
        "Resolved %d code blocks: %s",
        len(resolved),
        ", ".join(f"{b.line_range.start_line}-{b.line_range.end_line}" for b in resolved),
    )
    return resolved


def find_best_matching_range(
    new_code: str,
    original_code: str,
    fallback_range: LineReference,
    threshold: float = MATCH_SIMILARITY_THRESHOLD,
) -> LineReference:
    """Locate where ``new_code`` most likely belongs inside ``original_code``.

    The first non-blank line of the candidate is compared against every line of
    the original with character-set similarity. The best line scoring above
    ``threshold`` starts the range, which spans as many lines as the candidate
    has non-blank lines, clamped to the end of the original.

    Returns:
        The matched range, or ``fallback_range`` when nothing scores high enough.
    """
    new_lines = [line for line in new_code.split("\n") if line.strip()]
    if not new_lines:
        return fallback_range

    original_lines = original_code.split("\n")
    first_new_line = new_lines[0].strip()

    best_index = -1
    best_score = 0.0
    for index, original_line in enumerate(original_lines):
        score = char_jaccard(first_new_line, original_line.strip())
        if score > best_score and score > threshold:
            best_score = score
            best_index = index

    if best_index < 0:
        return fallback_range

    return LineReference(
        start_line=best_index + 1,
        end_line=min(best_index + len(new_lines), len(original_lines)),
    )
