"""Page analysis services."""

from .analysis_service import AnalysisResult, ExampleSentenceResult, PageAnalysisService
from .gemini_analysis_service import GeminiPageAnalysisService

__all__ = [
    "PageAnalysisService",
    "AnalysisResult",
    "ExampleSentenceResult",
    "GeminiPageAnalysisService",
]
