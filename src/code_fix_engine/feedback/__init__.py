"""Feedback categorization for AI review responses.

This package provides:
- FeedbackCategorizer / parse_feedback: split a response into typed sections
- Presentation helpers: labels and colors per category type
"""

from code_fix_engine.feedback.categorizer import FeedbackCategorizer, parse_feedback
from code_fix_engine.feedback.presentation import (
    get_category_bg_color,
    get_category_color,
    get_category_label,
    get_category_style,
)

__all__ = [
    "FeedbackCategorizer",
    "get_category_bg_color",
    "get_category_color",
    "get_category_label",
    "get_category_style",
    "parse_feedback",
]
