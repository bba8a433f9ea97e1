"""
Spanish Reader - A vocabulary companion for reading photographed book pages.

This package provides:
- AI analysis of book page photos into sentences and words
- A deduplicated vocabulary collection stored locally or per user in Firestore
- A guided sentence/word/translation reading walkthrough
- Training sessions over the collected vocabulary
"""

__version__ = "0.1.0"

from spanish_reader.core import Book, BookPage, PageAnalysisResult, VocabularyItem
from spanish_reader.io import PersistenceGateway

__all__ = [
    "Book",
    "BookPage",
    "PageAnalysisResult",
    "VocabularyItem",
    "PersistenceGateway",
]
