"""Services layer - business logic and external integrations."""

from spanish_reader.services.lexical_flattener import LexicalQueueEntry, build_lexical_queue, flatten
from spanish_reader.services.settings_manager import SettingsManager

# AI services
from spanish_reader.services.analysis import (
	AnalysisResult,
	ExampleSentenceResult,
	GeminiPageAnalysisService,
	PageAnalysisService,
)
from spanish_reader.services.speech import GeminiSpeechService, SpeechResult, SpeechService

__all__ = [
	"LexicalQueueEntry",
	"build_lexical_queue",
	"flatten",
	"SettingsManager",
	"PageAnalysisService",
	"AnalysisResult",
	"ExampleSentenceResult",
	"GeminiPageAnalysisService",
	"SpeechService",
	"SpeechResult",
	"GeminiSpeechService",
]
