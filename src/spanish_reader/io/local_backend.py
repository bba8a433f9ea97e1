"""Per-device storage backend over the local key/value store."""

import uuid
from typing import List, Optional, Sequence

from spanish_reader.core import Book, BookPage, MasteryLevel, VocabularyItem
from spanish_reader.io.local_store import BOOKS_KEY, VOCAB_KEY, LocalKeyValueStore, pages_key
from spanish_reader.io.storage_backend import StorageBackend


class LocalStorageBackend(StorageBackend):
    """Stores each collection as one JSON list in LocalKeyValueStore.

    Pages are stored per book under ``pages_key(book_id)``. Read-modify-write
    sequences never await in between, so they are atomic with respect to
    other coroutines on the same event loop.
    """

    def __init__(self, store: LocalKeyValueStore) -> None:
        self._store = store

    async def list_vocabulary(self) -> List[VocabularyItem]:
        return [VocabularyItem.from_dict(raw) for raw in self._store.get_json(VOCAB_KEY, [])]

    async def save_vocabulary(self, items: Sequence[VocabularyItem]) -> None:
        if not items:
            return
        current = self._store.get_json(VOCAB_KEY, [])
        self._store.set_json(VOCAB_KEY, [item.to_dict() for item in items] + current)

    async def update_mastery(self, item_id: str, level: MasteryLevel) -> None:
        current = self._store.get_json(VOCAB_KEY, [])
        for raw in current:
            if raw.get("id") == item_id:
                raw["masteryLevel"] = level.value
                raw["mastered"] = level is MasteryLevel.MASTERED
        self._store.set_json(VOCAB_KEY, current)

    async def delete_vocabulary(self, item_ids: Sequence[str]) -> None:
        doomed = set(item_ids)
        current = self._store.get_json(VOCAB_KEY, [])
        self._store.set_json(VOCAB_KEY, [raw for raw in current if raw.get("id") not in doomed])

    async def list_books(self) -> List[Book]:
        return [Book.from_dict(raw) for raw in self._store.get_json(BOOKS_KEY, [])]

    async def get_book(self, book_id: str) -> Optional[Book]:
        return next((b for b in await self.list_books() if b.id == book_id), None)

    async def insert_book(self, book: Book) -> str:
        book_id = str(uuid.uuid4())
        data = book.to_dict()
        data["id"] = book_id
        self._store.set_json(BOOKS_KEY, [data] + self._store.get_json(BOOKS_KEY, []))
        return book_id

    async def delete_book(self, book_id: str) -> None:
        books = self._store.get_json(BOOKS_KEY, [])
        self._store.set_json(BOOKS_KEY, [raw for raw in books if raw.get("id") != book_id])
        self._store.remove(pages_key(book_id))

    async def list_pages(self, book_id: str) -> List[BookPage]:
        return [BookPage.from_dict(raw) for raw in self._store.get_json(pages_key(book_id), [])]

    async def insert_page(self, page: BookPage) -> str:
        page_id = str(uuid.uuid4())
        data = page.to_dict()
        data["id"] = page_id
        key = pages_key(page.book_id)
        self._store.set_json(key, self._store.get_json(key, []) + [data])
        return page_id

    async def increment_page_count(self, book_id: str) -> None:
        books = self._store.get_json(BOOKS_KEY, [])
        for raw in books:
            if raw.get("id") == book_id:
                raw["pageCount"] = int(raw.get("pageCount") or 0) + 1
        self._store.set_json(BOOKS_KEY, books)

    async def update_page_progress(
        self, book_id: str, page_id: str, sentence_index: int
    ) -> None:
        key = pages_key(book_id)
        pages = self._store.get_json(key)
        if not pages:
            return
        for raw in pages:
            if raw.get("id") == page_id:
                raw["lastSentenceIndex"] = sentence_index
                self._store.set_json(key, pages)
                return
