"""Command-line interface for code-fix-engine."""
