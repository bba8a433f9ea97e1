"""Storage backend abstraction - one learner's vocabulary, books and pages."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from spanish_reader.core import Book, BookPage, MasteryLevel, VocabularyItem


class StorageBackend(ABC):
    """
    Abstract storage for a single learner's collections.

    Implementations (LocalStorageBackend, RemoteStorageBackend) only move data.
    Deduplication, ordering and failure policy live in PersistenceGateway.
    """

    @abstractmethod
    async def list_vocabulary(self) -> List[VocabularyItem]:
        pass

    @abstractmethod
    async def save_vocabulary(self, items: Sequence[VocabularyItem]) -> None:
        """Persist new items in one batch, keeping their identifiers."""
        pass

    @abstractmethod
    async def update_mastery(self, item_id: str, level: MasteryLevel) -> None:
        pass

    @abstractmethod
    async def delete_vocabulary(self, item_ids: Sequence[str]) -> None:
        pass

    @abstractmethod
    async def list_books(self) -> List[Book]:
        pass

    @abstractmethod
    async def get_book(self, book_id: str) -> Optional[Book]:
        pass

    @abstractmethod
    async def insert_book(self, book: Book) -> str:
        """Persist a book and return its new identifier (``book.id`` is ignored)."""
        pass

    @abstractmethod
    async def delete_book(self, book_id: str) -> None:
        pass

    @abstractmethod
    async def list_pages(self, book_id: str) -> List[BookPage]:
        pass

    @abstractmethod
    async def insert_page(self, page: BookPage) -> str:
        """Persist a page and return its new identifier (``page.id`` is ignored)."""
        pass

    @abstractmethod
    async def increment_page_count(self, book_id: str) -> None:
        """Atomically add one to the book's page count."""
        pass

    @abstractmethod
    async def update_page_progress(
        self, book_id: str, page_id: str, sentence_index: int
    ) -> None:
        pass
