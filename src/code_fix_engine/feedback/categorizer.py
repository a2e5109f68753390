"""Feedback categorizer for AI review responses.

This module splits the free-text answer of a language model into typed feedback
sections (errors, suggestions, improvements, explanations). The model is asked to
use section headers but nothing guarantees it does, so the parser:
- Recognizes headers in markdown heading form (``### ERRORS``) and bold form
  (``**ERRORS**``), case-insensitively, through a pattern table
- Surfaces the errors section first, whatever its position in the text
- Cleans bullets and numbering outside fenced code, keeping code verbatim
- Drops errors sections that only say "there are no errors"
- Drops sections that repeat another section's prose under a different header
- Falls back to classifying the whole response when no header is present

The categorizer never raises on malformed input.
"""

import logging
import re
from dataclasses import dataclass

from code_fix_engine.constants import DUPLICATE_SIMILARITY_THRESHOLD, ERRORS_MIN_CONTENT_LENGTH
from code_fix_engine.core.models import FeedbackCategory, FeedbackType
from code_fix_engine.utils.text import word_overlap_ratio

logger = logging.getLogger(__name__)

FENCE_MARKER = "```"


@dataclass(frozen=True, slots=True)
class HeaderPattern:
    """A header notation mapped to the category it opens."""

    type: FeedbackType
    regex: re.Pattern[str]


# Header token spellings; BEST PRACTICES is folded into suggestions
_HEADER_NAMES: tuple[tuple[FeedbackType, str], ...] = (
    (FeedbackType.ERRORS, r"ERRORS?"),
    (FeedbackType.SUGGESTIONS, r"SUGGESTIONS?"),
    (FeedbackType.IMPROVEMENTS, r"IMPROVEMENTS?"),
    (FeedbackType.EXPLANATIONS, r"EXPLANATIONS?"),
    (FeedbackType.SUGGESTIONS, r"BEST\s+PRACTICES?"),
)

# Header notations: markdown heading and bold text, each on its own line
_HEADER_NOTATIONS: tuple[str, ...] = (
    r"#{{2,6}}[ \t]*{name}[ \t]*:?[ \t]*\n+",
    r"\*\*{name}:?\*\*[ \t]*:?[ \t]*\n+",
)

HEADER_PATTERNS: tuple[HeaderPattern, ...] = tuple(
    HeaderPattern(type=feedback_type, regex=re.compile(notation.format(name=name), re.IGNORECASE))
    for notation in _HEADER_NOTATIONS
    for feedback_type, name in _HEADER_NAMES
)

_LIST_MARKER = re.compile(r"^(?:[-*+•]|\d+[.)])\s+")

# Paragraphs inside an errors section that belong to another section
_FOREIGN_HEADER = re.compile(
    r"^(?:(?:#{1,6}\s*|\*\*)(?:SUGGESTIONS?|IMPROVEMENTS?|EXPLANATIONS?|BEST\s+PRACTICES?)"
    r"|(?:SUGGESTIONS?|IMPROVEMENTS?|EXPLANATIONS?|BEST\s+PRACTICES?)[ \t]*:?[ \t]*$)",
    re.IGNORECASE | re.MULTILINE,
)
_FOREIGN_PROSE = re.compile(
    r"^(?:Explanations?|Suggestions?|Improvements?|Best\s+Practices?)[:\s]", re.IGNORECASE
)

# Phrasings a model uses to say there is nothing to report
NO_ERRORS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bno\s+(?:syntax\s+)?errors?\b", re.IGNORECASE),
    re.compile(r"\bno\s+(?:critical\s+|major\s+|obvious\s+)?issues?\b", re.IGNORECASE),
    re.compile(r"\bthere\s+are\s+no\b", re.IGNORECASE),
    re.compile(r"\b(?:does|do)\s+not\s+(?:contain|have)\s+any\s+errors?\b", re.IGNORECASE),
    re.compile(r"\bfree\s+of\s+(?:errors?|bugs?)\b", re.IGNORECASE),
)

_RELEVANT_TO_ERRORS = re.compile(r"error|bug|syntax", re.IGNORECASE)
ERROR_VOCABULARY = re.compile(
    r"error|bug|syntax|missing|incorrect|wrong|fails?|closing|tag|bracket|parenthesis",
    re.IGNORECASE,
)

# Used only when the response carries no section header at all
FALLBACK_ERROR_KEYWORDS: tuple[str, ...] = (
    "error",
    "bug",
    "issue",
    "problem",
    "wrong",
    "incorrect",
    "fails",
    "broken",
)


@dataclass(frozen=True, slots=True)
class _Section:
    type: FeedbackType
    offset: int
    body: str


class FeedbackCategorizer:
    """Splits AI responses into typed feedback categories.

    Examples:
        >>> categorizer = FeedbackCategorizer()
        >>> categories = categorizer.parse("### SUGGESTIONS\\n- Use a constant\\n")
        >>> categories[0].type, categories[0].content
        (<FeedbackType.SUGGESTIONS: 'suggestions'>, 'Use a constant')

    Attributes:
        duplicate_threshold: Word-overlap ratio above which a section of a different
            type is considered a repeat of an accepted one.
        errors_min_length: Errors sections without code or error vocabulary shorter
            than this are dropped.
    """

    def __init__(
        self,
        duplicate_threshold: float = DUPLICATE_SIMILARITY_THRESHOLD,
        errors_min_length: int = ERRORS_MIN_CONTENT_LENGTH,
    ) -> None:
        self.duplicate_threshold = duplicate_threshold
        self.errors_min_length = errors_min_length

    def parse(self, response: str) -> list[FeedbackCategory]:
        """Parse a response into feedback categories.

        Args:
            response: Full assistant message.

        Returns:
            Non-empty list of categories, errors first when present.
        """
        try:
            return self._parse(response)
        except Exception:
            logger.exception("Feedback parsing failed; classifying whole response")
            return [self._classify_unstructured(response)]

    def _parse(self, response: str) -> list[FeedbackCategory]:
        sections = self._split_sections(response)
        logger.debug(f"Found {len(sections)} feedback headers")

        if not sections:
            return [self._classify_unstructured(response)]

        # Errors always come first, the rest keep document order
        sections.sort(key=lambda s: (s.type is not FeedbackType.ERRORS, s.offset))

        categories: list[FeedbackCategory] = []
        for section in sections:
            body = section.body
            if section.type is FeedbackType.ERRORS:
                body = self._scrub_errors(body)

            content = clean_section_content(body)
            if not content:
                logger.warning(f"Empty content for {section.type} category")
                continue

            if section.type is FeedbackType.ERRORS and not self._has_error_content(content):
                logger.warning(
                    f"Skipped {section.type} category - no valid error content after cleanup"
                )
                continue

            if self._is_cross_type_duplicate(section.type, content, categories):
                logger.warning(f"Skipped {section.type} category - appears to be duplicate")
                continue

            categories = _merge_into(categories, FeedbackCategory(section.type, content))
            logger.debug(f"Added {section.type} category with {len(content)} chars")

        if not categories:
            # Headers were present but every section was discarded
            return [FeedbackCategory(FeedbackType.SUGGESTIONS, response)]

        logger.info(
            "Parsed %d feedback categories: %s",
            len(categories),
            ", ".join(str(c.type) for c in categories),
        )
        return categories

    def _split_sections(self, response: str) -> list[_Section]:
        """Locate headers and slice the text between consecutive headers."""
        headers: dict[int, tuple[FeedbackType, int]] = {}
        for pattern in HEADER_PATTERNS:
            for match in pattern.regex.finditer(response):
                # Keep the first pattern that claimed an offset
                if match.start() not in headers:
                    headers[match.start()] = (pattern.type, len(match.group(0)))

        offsets = sorted(headers)
        sections = []
        for index, offset in enumerate(offsets):
            feedback_type, header_length = headers[offset]
            start = offset + header_length
            end = offsets[index + 1] if index + 1 < len(offsets) else len(response)
            sections.append(
                _Section(type=feedback_type, offset=offset, body=response[start:end].strip())
            )
        return sections

    def _scrub_errors(self, body: str) -> str:
        """Remove paragraphs of an errors section that carry no error report."""
        kept = []
        for paragraph in split_paragraphs(body):
            trimmed = paragraph.strip()
            if _FOREIGN_HEADER.search(trimmed.split("\n", 1)[0]):
                continue
            if FENCE_MARKER not in trimmed and any(
                p.search(trimmed) for p in NO_ERRORS_PATTERNS
            ):
                continue
            if _FOREIGN_PROSE.match(trimmed) and not _RELEVANT_TO_ERRORS.search(trimmed):
                continue
            kept.append(paragraph)
        return "\n\n".join(kept).strip()

    def _has_error_content(self, content: str) -> bool:
        if FENCE_MARKER in content or ERROR_VOCABULARY.search(content):
            return True
        return len(content) >= self.errors_min_length

    def _is_cross_type_duplicate(
        self,
        feedback_type: FeedbackType,
        content: str,
        accepted: list[FeedbackCategory],
    ) -> bool:
        return any(
            existing.type is not feedback_type
            and word_overlap_ratio(content, existing.content) > self.duplicate_threshold
            for existing in accepted
        )

    @staticmethod
    def _classify_unstructured(response: str) -> FeedbackCategory:
        lowered = response.lower()
        if any(keyword in lowered for keyword in FALLBACK_ERROR_KEYWORDS):
            return FeedbackCategory(FeedbackType.ERRORS, response)
        return FeedbackCategory(FeedbackType.SUGGESTIONS, response)


def _merge_into(
    categories: list[FeedbackCategory], category: FeedbackCategory
) -> list[FeedbackCategory]:
    """Append ``category``, folding it into an existing entry of the same type."""
    for index, existing in enumerate(categories):
        if existing.type is category.type:
            merged = FeedbackCategory(
                existing.type, f"{existing.content}\n\n{category.content}"
            )
            return [*categories[:index], merged, *categories[index + 1 :]]
    return [*categories, category]


def split_paragraphs(text: str) -> list[str]:
    """Split text on blank lines, never inside a fenced code block."""
    paragraphs: list[str] = []
    current: list[str] = []
    in_code_block = False

    for line in text.split("\n"):
        if line.strip().startswith(FENCE_MARKER):
            in_code_block = not in_code_block
            current.append(line)
            continue
        if not in_code_block and not line.strip():
            if current:
                paragraphs.append("\n".join(current))
                current = []
            continue
        current.append(line)

    if current:
        paragraphs.append("\n".join(current))
    return paragraphs


def clean_section_content(content: str) -> str:
    """Strip list markers and blank lines outside fenced code blocks.

    Lines inside a fenced block, blank ones included, and the fence markers
    themselves are kept exactly as written.
    """
    processed: list[str] = []
    in_code_block = False

    for line in content.split("\n"):
        if line.strip().startswith(FENCE_MARKER):
            in_code_block = not in_code_block
            processed.append(line)
            continue

        if in_code_block:
            processed.append(line)
            continue

        cleaned = _LIST_MARKER.sub("", line.strip()).strip()
        if cleaned:
            processed.append(cleaned)

    return "\n".join(processed).strip()


def parse_feedback(response: str) -> list[FeedbackCategory]:
    """Parse an AI response into feedback categories with default thresholds.

    Examples:
        >>> categories = parse_feedback("### SUGGESTIONS\\nUse f-strings\\n### ERRORS\\nbug")
        >>> [c.type.value for c in categories]
        ['errors', 'suggestions']
    """
    return FeedbackCategorizer().parse(response)
