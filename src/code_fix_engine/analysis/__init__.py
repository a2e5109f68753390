"""Analysis of replacement batches."""

from code_fix_engine.analysis.overlap_detector import Overlap, OverlapDetector

__all__ = ["Overlap", "OverlapDetector"]
