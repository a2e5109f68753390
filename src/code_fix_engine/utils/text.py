"""Text utility functions for response parsing and fix preparation.

This module provides the similarity measures and line helpers shared by the
feedback categorizer, the code block extractor and the replacement engine.
"""


def normalize_content(text: str) -> str:
    """Normalize text by stripping whitespace and removing empty lines.

    Returns:
        A string where each non-empty original line has been trimmed and the remaining
        lines are joined with a single newline character.
    """
    return "\n".join(line.strip() for line in text.splitlines() if line.strip())


def split_lines(text: str) -> list[str]:
    """Split text on ``\\n`` keeping a trailing empty line.

    Unlike ``str.splitlines`` this keeps ``"a\\n"`` as two lines, so that line
    numbers line up with what an editor shows.
    """
    return text.split("\n")


def count_lines(text: str) -> int:
    """Return the number of lines in ``text`` as an editor counts them."""
    return len(split_lines(text))


def char_jaccard(first: str, second: str) -> float:
    """Jaccard similarity of the character sets of two strings.

    Comparison is case-insensitive. Identical strings score 1.0, and an empty
    string scores 0.0 against anything else.
    """
    if first == second:
        return 1.0
    if not first or not second:
        return 0.0

    set1 = set(first.lower())
    set2 = set(second.lower())
    return len(set1 & set2) / len(set1 | set2)


def line_similarity(line1: str, line2: str) -> float:
    """Character-set similarity of two lines, ignoring surrounding whitespace."""
    s1 = line1.strip().lower()
    s2 = line2.strip().lower()

    if s1 == s2:
        return 1.0
    if not s1 or not s2:
        return 0.0
    return char_jaccard(s1, s2)


def word_overlap_ratio(first: str, second: str) -> float:
    """Share of words from ``first`` that also occur in ``second``.

    The count of ``first``'s words (repeats included) found in ``second`` is divided
    by the word count of the longer of the two texts.
    """
    if not first and not second:
        return 1.0

    words1 = first.lower().split()
    words2 = second.lower().split()
    if not words1 or not words2:
        return 0.0

    vocabulary = set(words2)
    common = sum(1 for word in words1 if word in vocabulary)
    return common / max(len(words1), len(words2))
