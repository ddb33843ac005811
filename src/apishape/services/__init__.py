"""Analysis services for apishape."""

from apishape.services.analyzer import AnalysisResult, BatchResult, CodeAnalyzer

__all__ = [
    "AnalysisResult",
    "BatchResult",
    "CodeAnalyzer",
]
