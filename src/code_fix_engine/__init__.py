"""Code Fix Engine.

Turns free-text AI code review responses into labeled feedback sections and
validated, line-addressed edits that can be safely applied to the reviewed file.
"""

__version__ = "0.1.0"

from .analysis.overlap_detector import OverlapDetector
from .config.runtime_config import OverlapPolicy, RuntimeConfig
from .core.models import (
    CodeBlock,
    CodeFix,
    CodeReplacement,
    FeedbackCategory,
    FeedbackType,
    LineReference,
)
from .core.notifier import LoggingNotifier, NotificationLevel, NullNotifier, RecordingNotifier
from .core.patcher import PatchResult, ResponsePatcher, ReviewResult
from .extraction.code_blocks import (
    extract_all_code_blocks,
    extract_code_blocks_with_line_info,
    find_best_matching_range,
)
from .extraction.line_references import extract_line_references
from .feedback.categorizer import parse_feedback
from .replacement.engine import (
    apply_multiple_replacements,
    extract_original_code,
    merge_overlapping_replacements,
    prepare_code_fixes,
    replace_lines,
    validate_no_overlaps,
)

__all__ = [
    "CodeBlock",
    "CodeFix",
    "CodeReplacement",
    "FeedbackCategory",
    "FeedbackType",
    "LineReference",
    "LoggingNotifier",
    "NotificationLevel",
    "NullNotifier",
    "OverlapDetector",
    "OverlapPolicy",
    "PatchResult",
    "RecordingNotifier",
    "ResponsePatcher",
    "ReviewResult",
    "RuntimeConfig",
    "apply_multiple_replacements",
    "extract_all_code_blocks",
    "extract_code_blocks_with_line_info",
    "extract_line_references",
    "extract_original_code",
    "find_best_matching_range",
    "merge_overlapping_replacements",
    "parse_feedback",
    "prepare_code_fixes",
    "replace_lines",
    "validate_no_overlaps",
]
