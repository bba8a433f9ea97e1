"""Domain layer - Pure entities for books, page analyses and vocabulary."""

from .book import COVER_STYLES, Book, BookPage
from .page_analysis import (
    LexicalToken,
    PageAnalysisResult,
    PersistedAnalysis,
    Phrase,
    Punctuation,
    Sentence,
    Word,
    token_from_dict,
)
from .vocabulary_entities import (
    MasteryLevel,
    VocabularyCandidate,
    VocabularyItem,
    WordCategory,
    normalize_word,
)

__all__ = [
    "Book",
    "BookPage",
    "COVER_STYLES",
    "LexicalToken",
    "PageAnalysisResult",
    "PersistedAnalysis",
    "Phrase",
    "Punctuation",
    "Sentence",
    "Word",
    "token_from_dict",
    "MasteryLevel",
    "VocabularyCandidate",
    "VocabularyItem",
    "WordCategory",
    "normalize_word",
]
