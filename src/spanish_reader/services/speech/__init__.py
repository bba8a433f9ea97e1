"""Speech synthesis services."""

from .gemini_speech_service import GeminiSpeechService
from .speech_service import SpeechResult, SpeechService

__all__ = ["SpeechService", "SpeechResult", "GeminiSpeechService"]
