"""Constants for the response-to-patch engine.

This module defines the default thresholds shared by the categorizer, the
extractor and the replacement engine. ``RuntimeConfig`` starts from these values.
"""

# Two sections of different types whose word-overlap ratio exceeds this value
# are considered the same paragraph repeated under two headers
DUPLICATE_SIMILARITY_THRESHOLD: float = 0.8

# An errors section shorter than this (without code or error vocabulary) is
# treated as "the model said there are no errors"
ERRORS_MIN_CONTENT_LENGTH: int = 30

# Minimum character-set similarity for a code line to anchor a matching range
MATCH_SIMILARITY_THRESHOLD: float = 0.5

# Largest leading number still read as a line-number prefix in space-padded form
MAX_LINE_NUMBER: int = 10000

# Replacement code longer than RUNAWAY_RATIO x the replaced span is suspect
RUNAWAY_RATIO: float = 3.0

# Suspect replacement code covering this share of the file is an echoed file
WHOLE_FILE_RATIO: float = 0.7

# Extra lines kept after the anchor when slicing an echoed file
RELEVANT_PORTION_PADDING: int = 2

# Prefix length of the first selected line used as a substring anchor
ANCHOR_PREFIX_LENGTH: int = 20

# Line similarity needed for a direct anchor when slicing an echoed file
ANCHOR_LINE_SIMILARITY: float = 0.7

# Valid log levels
VALID_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
