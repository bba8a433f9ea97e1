"""Persistence Gateway - uniform access to vocabulary, books and pages.

Every call picks its backend from the current identity: a signed-in learner
is routed to the remote document store, everyone else to the local device
store. The choice is made per call, so signing in mid-session redirects the
next call without any migration.

Failure policy: the learner must be able to keep reading when the backend
misbehaves. Failed reads are logged and return empty results, failed writes
are logged and skipped. Only ``create_book`` and ``append_page`` re-raise,
because their callers cannot continue without the new identifier.
"""

import logging
import random
import time
import uuid
from dataclasses import replace
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, TypeVar

from spanish_reader.core import (
    COVER_STYLES,
    Book,
    BookPage,
    MasteryLevel,
    PageAnalysisResult,
    VocabularyCandidate,
    VocabularyItem,
    normalize_word,
)
from spanish_reader.io.document_store import RemoteDocumentStore
from spanish_reader.io.identity import IdentityContext
from spanish_reader.io.local_backend import LocalStorageBackend
from spanish_reader.io.remote_backend import RemoteStorageBackend
from spanish_reader.io.storage_backend import StorageBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")


def current_millis() -> int:
    return int(time.time() * 1000)


class PersistenceGateway:
    """Routes persistence calls and owns deduplication and failure policy."""

    def __init__(
        self,
        identity: IdentityContext,
        local_backend: LocalStorageBackend,
        remote_store: Optional[RemoteDocumentStore] = None,
        clock: Callable[[], int] = current_millis,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._identity = identity
        self._local = local_backend
        self._remote_store = remote_store
        self._clock = clock
        self._rng = rng or random.Random()

    def _backend(self) -> StorageBackend:
        user_id = self._identity.user_id
        if user_id and self._remote_store is not None:
            return RemoteStorageBackend(self._remote_store, user_id)
        return self._local

    @staticmethod
    async def _read(operation: Callable[[], Awaitable[T]], default: T, description: str) -> T:
        try:
            return await operation()
        except Exception:
            logger.exception("Failed to %s", description)
            return default

    @staticmethod
    async def _write(operation: Callable[[], Awaitable[None]], description: str) -> bool:
        try:
            await operation()
            return True
        except Exception:
            logger.exception("Failed to %s", description)
            return False

    # Vocabulary

    async def list_vocabulary(self) -> List[VocabularyItem]:
        """Return all items, newest first."""
        items = await self._read(self._backend().list_vocabulary, [], "load vocabulary")
        return sorted(items, key=lambda item: item.added_at, reverse=True)

    async def add_vocabulary_batch(self, candidates: Iterable[VocabularyCandidate]) -> int:
        """Insert candidates whose word is not stored yet.

        Words are compared trimmed and case-insensitively, against storage and
        against earlier candidates of the same batch. All inserted items share
        one ``added_at`` timestamp.

        Returns:
            Number of items actually inserted.
        """
        backend = self._backend()
        try:
            current = await backend.list_vocabulary()
        except Exception:
            # Without the stored words the batch cannot be deduplicated.
            logger.exception("Failed to load vocabulary, skipping batch insert")
            return 0

        existing = {item.normalized_word for item in current}
        added_at = self._clock()
        new_items: List[VocabularyItem] = []
        for candidate in candidates:
            key = normalize_word(candidate.word)
            if not key or key in existing:
                continue
            existing.add(key)
            new_items.append(VocabularyItem.from_candidate(candidate, str(uuid.uuid4()), added_at))

        if not new_items:
            return 0
        saved = await self._write(
            lambda: backend.save_vocabulary(new_items), "add vocabulary batch"
        )
        return len(new_items) if saved else 0

    async def import_vocabulary(self, items: Iterable[VocabularyItem]) -> int:
        """Import previously exported items, keeping their identifiers.

        Applies the same word deduplication as ``add_vocabulary_batch``.
        """
        backend = self._backend()
        try:
            current = await backend.list_vocabulary()
        except Exception:
            logger.exception("Failed to load vocabulary, skipping import")
            return 0

        existing = {item.normalized_word for item in current}
        now = self._clock()
        to_import: List[VocabularyItem] = []
        for item in items:
            key = item.normalized_word
            if not key or key in existing:
                continue
            existing.add(key)
            to_import.append(
                replace(
                    item,
                    id=item.id or str(uuid.uuid4()),
                    word=item.word.strip(),
                    added_at=item.added_at or now,
                )
            )

        if not to_import:
            return 0
        saved = await self._write(lambda: backend.save_vocabulary(to_import), "import vocabulary")
        return len(to_import) if saved else 0

    async def update_mastery_level(self, item_id: str, level: MasteryLevel) -> None:
        level = MasteryLevel(level)
        backend = self._backend()
        await self._write(
            lambda: backend.update_mastery(item_id, level),
            f"update mastery of {item_id}",
        )

    async def toggle_mastered(self, item_id: str) -> None:
        """Flip an item between ``mastered`` and ``good``."""
        items = await self.list_vocabulary()
        item = next((i for i in items if i.id == item_id), None)
        if item is None:
            return
        level = MasteryLevel.GOOD if item.mastery_level is MasteryLevel.MASTERED else MasteryLevel.MASTERED
        await self.update_mastery_level(item_id, level)

    async def remove_vocabulary_batch(self, item_ids: Sequence[str]) -> None:
        ids = list(item_ids)
        if not ids:
            return
        backend = self._backend()
        await self._write(lambda: backend.delete_vocabulary(ids), "remove vocabulary batch")

    async def remove_vocabulary(self, item_id: str) -> None:
        await self.remove_vocabulary_batch([item_id])

    async def is_vocabulary_saved(self, word: str) -> bool:
        key = normalize_word(word)
        return any(item.normalized_word == key for item in await self.list_vocabulary())

    # Books and pages

    async def list_books(self) -> List[Book]:
        """Return all books, newest first."""
        books = await self._read(self._backend().list_books, [], "load books")
        return sorted(books, key=lambda book: book.created_at, reverse=True)

    async def get_book(self, book_id: str) -> Optional[Book]:
        backend = self._backend()
        return await self._read(lambda: backend.get_book(book_id), None, f"load book {book_id}")

    async def create_book(self, title: str, author: Optional[str] = None) -> str:
        """Create an empty book and return its identifier.

        Raises:
            ValueError: If the title is empty.
            Exception: Whatever the backend raised; creation failures propagate.
        """
        if not title or not title.strip():
            raise ValueError("Book title cannot be empty")
        book = Book(
            id="",
            title=title.strip(),
            author=(author or "").strip() or None,
            cover_style=self._rng.choice(COVER_STYLES),
            created_at=self._clock(),
            page_count=0,
        )
        try:
            book_id = await self._backend().insert_book(book)
        except Exception:
            logger.exception("Failed to create book %r", book.title)
            raise
        logger.info("Created book %s (%s)", book_id, book.title)
        return book_id

    async def delete_book(self, book_id: str) -> None:
        """Delete a book. Page removal is best-effort on the remote backend."""
        backend = self._backend()
        await self._write(lambda: backend.delete_book(book_id), f"delete book {book_id}")

    async def list_pages(self, book_id: str) -> List[BookPage]:
        """Return the pages of a book in page-number order."""
        backend = self._backend()
        pages = await self._read(lambda: backend.list_pages(book_id), [], f"load pages of {book_id}")
        return sorted(pages, key=lambda page: page.page_number)

    async def append_page(self, book_id: str, image: str, analysis: PageAnalysisResult) -> str:
        """Append a page to a book and return the page identifier.

        The page number is the book's page count plus one. The count only ever
        grows, so numbers are never reused.

        Raises:
            ValueError: If the book does not exist.
            Exception: Whatever the backend raised; creation failures propagate.
        """
        backend = self._backend()
        try:
            book = await backend.get_book(book_id)
            if book is None:
                raise ValueError(f"Unknown book: {book_id}")
            page = BookPage(
                id="",
                book_id=book_id,
                page_number=book.page_count + 1,
                image=image,
                analysis=analysis,
                created_at=self._clock(),
                last_sentence_index=0,
            )
            page_id = await backend.insert_page(page)
            await backend.increment_page_count(book_id)
        except Exception:
            logger.exception("Failed to add page to book %s", book_id)
            raise
        logger.info("Appended page %d (%s) to book %s", page.page_number, page_id, book_id)
        return page_id

    async def update_page_progress(self, book_id: str, page_id: str, sentence_index: int) -> None:
        backend = self._backend()
        await self._write(
            lambda: backend.update_page_progress(book_id, page_id, sentence_index),
            f"save progress of page {page_id}",
        )
