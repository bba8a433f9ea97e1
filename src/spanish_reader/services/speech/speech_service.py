"""Speech Service - interface for text-to-speech synthesis."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class SpeechResult:
    """Synthesized audio as raw 16-bit mono PCM."""

    audio: Optional[bytes]
    model: str
    sample_rate: int = 24000
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None or not self.audio


class SpeechService(ABC):
    """
    Abstract speech synthesis service.

    Implementations (e.g., GeminiSpeechService) handle API calls. Playback is
    left to the caller.
    """

    @abstractmethod
    async def synthesize(self, text: str, api_key: str) -> SpeechResult:
        """
        Read ``text`` aloud.

        Args:
            text: Spanish text to speak.
            api_key: Model provider API key for authentication.

        Returns:
            SpeechResult with PCM audio or an error message.
        """
        pass
