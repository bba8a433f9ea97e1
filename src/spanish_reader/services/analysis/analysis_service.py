"""Page Analysis Service - interface for AI sentence and word analysis."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from spanish_reader.core import PageAnalysisResult


@dataclass
class AnalysisResult:
    """Result of a page analysis request."""

    analysis: Optional[PageAnalysisResult]
    model: str
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        """True if the analysis failed."""
        return self.error is not None or self.analysis is None


@dataclass
class ExampleSentenceResult:
    """A generated example sentence for a vocabulary item."""

    sentence: Optional[str]
    translation: Optional[str]
    model: str
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.error is None and self.sentence is not None


class PageAnalysisService(ABC):
    """
    Abstract service extracting sentences and per-word analysis from a page image.

    Implementations (e.g., GeminiPageAnalysisService) handle API calls and
    report failures through the result's ``error`` instead of raising.
    """

    @abstractmethod
    async def analyze_image(self, image_base64: str, api_key: str) -> AnalysisResult:
        """
        Analyze a photographed book page.

        Args:
            image_base64: JPEG image, base64 encoded.
            api_key: Model provider API key for authentication.

        Returns:
            AnalysisResult with the page analysis or an error message.
        """
        pass

    @abstractmethod
    async def generate_example_sentence(
        self, word: str, category: str, api_key: str
    ) -> ExampleSentenceResult:
        """Produce a new example sentence using ``word``."""
        pass
