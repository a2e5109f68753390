"""Core data models and orchestration."""

from code_fix_engine.core.models import (
    CodeBlock,
    CodeFix,
    CodeReplacement,
    FeedbackCategory,
    FeedbackType,
    LineRange,
    LineReference,
)

__all__ = [
    "CodeBlock",
    "CodeFix",
    "CodeReplacement",
    "FeedbackCategory",
    "FeedbackType",
    "LineRange",
    "LineReference",
]
