"""Display attributes for feedback categories.

Labels and colors used when rendering categories, so that every front end shows
errors in red, suggestions in blue, improvements in green and explanations in
purple.
"""

from code_fix_engine.core.models import FeedbackType

_DEFAULT_COLOR = "#6b7280"
_DEFAULT_BG_COLOR = "rgba(107, 114, 128, 0.1)"

CATEGORY_COLORS: dict[FeedbackType, str] = {
    FeedbackType.ERRORS: "#dc2626",
    FeedbackType.SUGGESTIONS: "#3b82f6",
    FeedbackType.IMPROVEMENTS: "#10b981",
    FeedbackType.EXPLANATIONS: "#8b5cf6",
}

CATEGORY_BG_COLORS: dict[FeedbackType, str] = {
    FeedbackType.ERRORS: "rgba(220, 38, 38, 0.1)",
    FeedbackType.SUGGESTIONS: "rgba(59, 130, 246, 0.1)",
    FeedbackType.IMPROVEMENTS: "rgba(16, 185, 129, 0.1)",
    FeedbackType.EXPLANATIONS: "rgba(139, 92, 246, 0.1)",
}

CATEGORY_LABELS: dict[FeedbackType, str] = {
    FeedbackType.ERRORS: "Errors",
    FeedbackType.SUGGESTIONS: "Suggestions",
    FeedbackType.IMPROVEMENTS: "Improvements",
    FeedbackType.EXPLANATIONS: "Explanations",
}


def _coerce(feedback_type: FeedbackType | str) -> FeedbackType | None:
    try:
        return FeedbackType(feedback_type)
    except ValueError:
        return None


def get_category_label(feedback_type: FeedbackType | str) -> str:
    """Return the display label for a category, ``"Feedback"`` when unknown."""
    known = _coerce(feedback_type)
    return CATEGORY_LABELS[known] if known else "Feedback"


def get_category_color(feedback_type: FeedbackType | str) -> str:
    """Return the foreground (and border) hex color for a category."""
    known = _coerce(feedback_type)
    return CATEGORY_COLORS[known] if known else _DEFAULT_COLOR


def get_category_bg_color(feedback_type: FeedbackType | str) -> str:
    """Return the translucent background color for a category."""
    known = _coerce(feedback_type)
    return CATEGORY_BG_COLORS[known] if known else _DEFAULT_BG_COLOR


def get_category_style(feedback_type: FeedbackType | str) -> str:
    """Return a rich style string for a category's title and border."""
    return f"bold {get_category_color(feedback_type)}"
