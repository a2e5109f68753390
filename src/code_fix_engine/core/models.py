"""Data models for the response-to-patch engine.

This module contains the value types passed between the feedback categorizer,
the code block extractor and the replacement engine. All of them are transient:
they are built per AI response (or per apply action) and never persisted.

Line numbers are 1-indexed and inclusive on both ends everywhere.

Example:
    >>> from code_fix_engine.core.models import CodeReplacement
    >>> replacement = CodeReplacement(start_line=2, end_line=4, new_code="replacement")
    >>> replacement.span
    3
"""

from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

# Type aliases for clarity and strict typing
LineRange: TypeAlias = tuple[int, int]


class FeedbackType(str, Enum):
    """Feedback section types recognized in an AI review response."""

    ERRORS = "errors"
    SUGGESTIONS = "suggestions"
    IMPROVEMENTS = "improvements"
    EXPLANATIONS = "explanations"

    def __str__(self) -> str:
        """Return string representation of the type."""
        return self.value


@dataclass(frozen=True, slots=True)
class LineReference:
    """A textual mention of a line span, extracted from prose."""

    start_line: int
    end_line: int

    def as_range(self) -> LineRange:
        """Return the reference as a ``(start, end)`` tuple."""
        return (self.start_line, self.end_line)

    @property
    def line_count(self) -> int:
        """Number of lines covered by the reference."""
        return self.end_line - self.start_line + 1


@dataclass(frozen=True, slots=True)
class CodeBlock:
    """A cleaned fenced code block plus its resolved target range.

    ``line_range`` stays ``None`` until the extractor resolves which part of the
    original file the block is meant to replace.
    """

    code: str
    language: str | None = None
    line_range: LineReference | None = None


@dataclass(frozen=True, slots=True)
class FeedbackCategory:
    """One logical section of an AI response.

    ``content`` excludes the header token and has already been de-duplicated
    against sibling sections.
    """

    type: FeedbackType
    content: str


@dataclass(frozen=True, slots=True)
class CodeReplacement:
    """An edit instruction against a specific snapshot of file text."""

    start_line: int
    end_line: int
    new_code: str

    @property
    def span(self) -> int:
        """Number of lines the replacement removes."""
        return self.end_line - self.start_line + 1


@dataclass(frozen=True, slots=True)
class CodeFix:
    """A replacement enriched with the text it would remove, for preview.

    Attributes:
        start_line: First replaced line (1-indexed, inclusive).
        end_line: Last replaced line (1-indexed, inclusive).
        original_code: Current text of the span in the file.
        new_code: Text that will take its place.
    """

    start_line: int
    end_line: int
    original_code: str
    new_code: str

    def to_replacement(self) -> CodeReplacement:
        """Return the replacement that commits this fix."""
        return CodeReplacement(
            start_line=self.start_line, end_line=self.end_line, new_code=self.new_code
        )
