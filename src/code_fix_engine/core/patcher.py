"""Response-to-patch orchestration.

This module provides the ResponsePatcher class that runs the whole pipeline for
one AI response: categorize the feedback, extract code blocks bound to line
ranges, prepare previewable fixes, and apply confirmed replacements to the file
text according to the configured overlap policy.
"""

import logging
from dataclasses import dataclass, field

from code_fix_engine.analysis.overlap_detector import Overlap, OverlapDetector
from code_fix_engine.config.runtime_config import OverlapPolicy, RuntimeConfig
from code_fix_engine.core.models import (
    CodeBlock,
    CodeFix,
    CodeReplacement,
    FeedbackCategory,
    LineReference,
)
from code_fix_engine.core.notifier import LoggingNotifier, NotificationLevel, Notifier
from code_fix_engine.extraction.code_blocks import (
    extract_code_blocks_with_line_info,
    find_best_matching_range,
)
from code_fix_engine.feedback.categorizer import FeedbackCategorizer
from code_fix_engine.replacement.engine import (
    apply_multiple_replacements,
    merge_overlapping_replacements,
    prepare_code_fixes,
    validate_no_overlaps,
)
from code_fix_engine.utils.text import count_lines


@dataclass(frozen=True, slots=True)
class PatchResult:
    """Outcome of applying a batch of replacements.

    Attributes:
        content: File text after the batch; the input text when nothing applied.
        applied: Replacements that were written (after merging, if any).
        rejected: Replacements left out because of invalid bounds or an overlap
            rejected by policy.
        changed: Whether ``content`` differs from the input text.
        overlaps: Overlapping pairs found in the submitted batch.
    """

    content: str
    applied: list[CodeReplacement]
    rejected: list[CodeReplacement]
    changed: bool
    overlaps: list[Overlap] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ReviewResult:
    """Everything derived from one AI response for one file and selection."""

    categories: list[FeedbackCategory]
    code_blocks: list[CodeBlock]
    fixes: list[CodeFix]

    @property
    def replacements(self) -> list[CodeReplacement]:
        """Replacements that commit the previewed fixes."""
        return [fix.to_replacement() for fix in self.fixes]


class ResponsePatcher:
    """Turns AI review responses into feedback sections and applicable fixes."""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        """Create a ResponsePatcher.

        Args:
            config: Thresholds and overlap policy. Defaults to
                ``RuntimeConfig.from_defaults()``.
            notifier: Receives user-facing outcome messages. Defaults to a
                notifier that writes to the log.
        """
        self.config = config or RuntimeConfig.from_defaults()
        self.notifier: Notifier = notifier or LoggingNotifier()
        self.logger = logging.getLogger(__name__)
        self.categorizer = FeedbackCategorizer(
            duplicate_threshold=self.config.duplicate_similarity_threshold,
            errors_min_length=self.config.errors_min_length,
        )
        self.overlap_detector = OverlapDetector()

    def categorize(self, response: str) -> list[FeedbackCategory]:
        """Split a response into typed feedback categories, errors first."""
        return self.categorizer.parse(response)

    def extract_code_blocks(self, response: str, selection: LineReference) -> list[CodeBlock]:
        """Extract code blocks from a response with their target line ranges."""
        return extract_code_blocks_with_line_info(
            response, selection, max_line_number=self.config.max_line_number
        )

    def extract_replacements(
        self, response: str, selection: LineReference
    ) -> list[CodeReplacement]:
        """Turn the code blocks of a response into replacements.

        Args:
            response: Full assistant message.
            selection: Lines the user selected before asking for a review.

        Returns:
            One replacement per non-empty code block, in document order.
        """
        return [
            CodeReplacement(
                start_line=block.line_range.start_line,
                end_line=block.line_range.end_line,
                new_code=block.code,
            )
            for block in self.extract_code_blocks(response, selection)
            if block.line_range is not None
        ]

    def locate(self, new_code: str, file_text: str, fallback: LineReference) -> LineReference:
        """Guess which lines of the file ``new_code`` rewrites from its content alone."""
        return find_best_matching_range(
            new_code, file_text, fallback, threshold=self.config.match_similarity_threshold
        )

    def preview(self, response: str, file_text: str, selection: LineReference) -> list[CodeFix]:
        """Build the before/after fixes a user confirms before applying."""
        fixes = prepare_code_fixes(
            file_text,
            self.extract_replacements(response, selection),
            runaway_ratio=self.config.runaway_ratio,
            whole_file_ratio=self.config.whole_file_ratio,
            match_threshold=self.config.match_similarity_threshold,
        )
        if not fixes:
            self.notifier.notify(NotificationLevel.INFO, "No code fixes found in response")
        return fixes

    def apply(self, file_text: str, replacements: list[CodeReplacement]) -> PatchResult:
        """Apply confirmed replacements to the file text.

        Overlapping batches are merged or refused according to
        ``config.overlap_policy``. Replacements whose bounds fall outside the file
        are left out and reported as rejected.

        Args:
            file_text: Current file content.
            replacements: Replacements to write.

        Returns:
            PatchResult with the new content and per-replacement outcome.
        """
        if not replacements:
            self.notifier.notify(NotificationLevel.INFO, "No fixes to apply")
            return PatchResult(content=file_text, applied=[], rejected=[], changed=False)

        overlaps: list[Overlap] = []
        batch = list(replacements)
        if not validate_no_overlaps(batch):
            overlaps = self.overlap_detector.find_overlaps(batch)
            if self.config.overlap_policy is OverlapPolicy.REJECT:
                self.notifier.notify(
                    NotificationLevel.WARNING,
                    f"Rejected {len(batch)} fixes: {len(overlaps)} overlapping pair(s)",
                )
                return PatchResult(
                    content=file_text,
                    applied=[],
                    rejected=batch,
                    changed=False,
                    overlaps=overlaps,
                )
            batch = merge_overlapping_replacements(batch)
            self.logger.info(
                f"Merged {len(replacements)} overlapping replacements into {len(batch)}"
            )

        line_count = count_lines(file_text)
        applicable = []
        rejected = []
        for replacement in batch:
            if 1 <= replacement.start_line <= replacement.end_line <= line_count:
                applicable.append(replacement)
            else:
                self.logger.warning(
                    f"Skipping replacement for lines {replacement.start_line}-"
                    f"{replacement.end_line}: file has {line_count} lines"
                )
                rejected.append(replacement)

        content = apply_multiple_replacements(file_text, applicable)
        changed = content != file_text

        if applicable:
            self.notifier.notify(
                NotificationLevel.SUCCESS, f"Applied {len(applicable)} fix(es)"
            )
        if rejected:
            self.notifier.notify(
                NotificationLevel.WARNING, f"Skipped {len(rejected)} fix(es) with invalid lines"
            )

        return PatchResult(
            content=content,
            applied=applicable,
            rejected=rejected,
            changed=changed,
            overlaps=overlaps,
        )

    def process(self, response: str, file_text: str, selection: LineReference) -> ReviewResult:
        """Run categorization, extraction and fix preparation for one response."""
        categories = self.categorize(response)
        code_blocks = self.extract_code_blocks(response, selection)
        fixes = self.preview(response, file_text, selection)
        self.logger.info(
            f"Processed response: {len(categories)} categories, "
            f"{len(code_blocks)} code blocks, {len(fixes)} fixes"
        )
        return ReviewResult(categories=categories, code_blocks=code_blocks, fixes=fixes)
