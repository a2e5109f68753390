"""Line-number prefixes and editorial comments in model-written code.

Models often echo code with line numbers in front of each line, or annotate the
lines they touched (``x = 1  // fixed``). Both must go before the code can be
written back into a file. Four prefix notations are supported:

    PIPE       ``   5 | const x = 1``
    COLON      ``5: const x = 1``
    LINE_WORD  ``Line 5: const x = 1``
    PADDED     ``   5  const x = 1``

Indentation after the prefix is preserved.
"""

import re
from collections import Counter
from enum import Enum

from code_fix_engine.constants import MAX_LINE_NUMBER


class LineNumberStyle(str, Enum):
    """Line-number prefix notations found in model output."""

    PIPE = "pipe"
    COLON = "colon"
    LINE_WORD = "line-word"
    PADDED = "padded"

    def __str__(self) -> str:
        """Return string representation of style."""
        return self.value


_PREFIX_FORMATS: dict[LineNumberStyle, str] = {
    LineNumberStyle.PIPE: "{number:>4} | {line}",
    LineNumberStyle.COLON: "{number}: {line}",
    LineNumberStyle.LINE_WORD: "Line {number}: {line}",
    LineNumberStyle.PADDED: "{number:>4}  {line}",
}

# A block is stripped with the pattern of its dominant notation only
_STRIP_PATTERNS: dict[LineNumberStyle, re.Pattern[str]] = {
    LineNumberStyle.PIPE: re.compile(r"^\s*(\d+) ?\|\s?"),
    LineNumberStyle.COLON: re.compile(r"^\s*(\d+):\s?"),
    LineNumberStyle.LINE_WORD: re.compile(r"^\s*line\s+(\d+):\s?", re.IGNORECASE),
    LineNumberStyle.PADDED: re.compile(r"^\s*(\d+)\s{2}"),
}

_DETECT_PATTERNS: tuple[tuple[LineNumberStyle, re.Pattern[str]], ...] = (
    (LineNumberStyle.PIPE, re.compile(r"^\s*(\d+) ?\|")),
    (LineNumberStyle.COLON, re.compile(r"^\s*\d+:\s")),
    (LineNumberStyle.LINE_WORD, re.compile(r"^\s*line\s+\d+:", re.IGNORECASE)),
    (LineNumberStyle.PADDED, re.compile(r"^\s*(\d+)\s{2,}\S")),
)

_DETECTION_SAMPLE_SIZE = 5

_CHANGE_WORDS = r"(?:changed|fixed|corrected|updated|modified|added|removed|replaced)"

# Trailing comments that editorialize a change; group 1 is the code to keep
EXPLANATORY_COMMENT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"^(\s*\S.*?)\s*(?<!:)//\s*{_CHANGE_WORDS}.*$", re.IGNORECASE),
    re.compile(r"^(\s*\S.*?)\s*(?<!:)//\s*line\s*\d+.*$", re.IGNORECASE),
    re.compile(rf"^(\s*\S.*?)\s+#\s*{_CHANGE_WORDS}.*$", re.IGNORECASE),
    re.compile(r"^(\s*\S.*?)\s+#\s*line\s*\d+.*$", re.IGNORECASE),
)


def _is_plausible_line_number(match: re.Match[str], max_line_number: int) -> bool:
    return 1 <= int(match.group(1)) <= max_line_number


def add_line_numbers(
    code: str,
    style: LineNumberStyle = LineNumberStyle.PIPE,
    start: int = 1,
) -> str:
    """Prefix every line of ``code`` with its number in the given notation.

    Examples:
        >>> add_line_numbers("a\\nb", LineNumberStyle.COLON, start=7)
        '7: a\\n8: b'
    """
    template = _PREFIX_FORMATS[LineNumberStyle(style)]
    return "\n".join(
        template.format(number=number, line=line)
        for number, line in enumerate(code.split("\n"), start=start)
    )


def _matching_styles(line: str, max_line_number: int) -> list[LineNumberStyle]:
    styles = []
    for style, pattern in _DETECT_PATTERNS:
        match = pattern.match(line)
        if match and (
            style is not LineNumberStyle.PADDED
            or _is_plausible_line_number(match, max_line_number)
        ):
            styles.append(style)
    return styles


def detect_line_number_style(
    code: str, max_line_number: int = MAX_LINE_NUMBER
) -> LineNumberStyle | None:
    """Return the notation carried by most non-blank lines of ``code``.

    Ties go to the notation declared first in :class:`LineNumberStyle`.
    ``None`` means no line carries a prefix.
    """
    counts: Counter[LineNumberStyle] = Counter()
    for line in code.split("\n"):
        if line.strip():
            counts.update(_matching_styles(line, max_line_number))

    if not counts:
        return None
    return max(LineNumberStyle, key=lambda style: counts[style])


def strip_line_numbers(code: str, max_line_number: int = MAX_LINE_NUMBER) -> str:
    """Remove the block's line-number prefix from each line that carries one.

    Only the dominant notation (see :func:`detect_line_number_style`) is
    stripped, so code such as ``| grep foo`` under a padded prefix keeps its
    leading pipe.

    Args:
        code: Code as written by the model.
        max_line_number: Largest number accepted in the space-padded notation.

    Returns:
        The code with prefixes removed and indentation kept.
    """
    style = detect_line_number_style(code, max_line_number)
    if style is None:
        return code

    pattern = _STRIP_PATTERNS[style]
    stripped_lines = []
    for line in code.split("\n"):
        match = pattern.match(line)
        if match and (
            style is not LineNumberStyle.PADDED
            or _is_plausible_line_number(match, max_line_number)
        ):
            line = line[match.end() :]
        stripped_lines.append(line)

    return "\n".join(stripped_lines)


def has_line_numbers(code: str, max_line_number: int = MAX_LINE_NUMBER) -> bool:
    """Tell whether code looks like it carries line-number prefixes.

    The first few non-blank lines are sampled; at least half must carry a prefix.
    """
    sample = [line for line in code.split("\n") if line.strip()][:_DETECTION_SAMPLE_SIZE]
    if not sample:
        return False

    numbered = sum(1 for line in sample if _matching_styles(line, max_line_number))
    return numbered >= (len(sample) + 1) // 2


def strip_explanatory_comments(code: str) -> str:
    """Drop trailing comments such as ``// fixed`` or ``# Line 12`` after code.

    Comment-only lines are left alone; only comments trailing actual code on the
    same line are removed.
    """
    cleaned_lines = []
    for line in code.split("\n"):
        for pattern in EXPLANATORY_COMMENT_PATTERNS:
            match = pattern.match(line)
            if match:
                line = match.group(1).rstrip()
                break
        cleaned_lines.append(line)

    return "\n".join(cleaned_lines)
