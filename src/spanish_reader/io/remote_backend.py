"""Per-user storage backend over a remote document store."""

from typing import Any, List, Optional, Sequence

from spanish_reader.core import Book, BookPage, MasteryLevel, VocabularyItem
from spanish_reader.io.document_store import CollectionPath, Document, RemoteDocumentStore
from spanish_reader.io.storage_backend import StorageBackend


def sanitize(value: Any) -> Any:
    """Drop ``None`` attributes, recursively.

    The remote store rejects absent values; empty strings are kept.
    """
    if isinstance(value, dict):
        return {key: sanitize(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [sanitize(item) for item in value]
    return value


class RemoteStorageBackend(StorageBackend):
    """Maps one user's collections onto ``users/{uid}/vocabulary|books|books/{id}/pages``."""

    def __init__(self, store: RemoteDocumentStore, user_id: str) -> None:
        if not user_id:
            raise ValueError("RemoteStorageBackend requires a user id")
        self._store = store
        self.user_id = user_id

    def _vocabulary(self) -> CollectionPath:
        return ("users", self.user_id, "vocabulary")

    def _books(self) -> CollectionPath:
        return ("users", self.user_id, "books")

    def _pages(self, book_id: str) -> CollectionPath:
        return ("users", self.user_id, "books", book_id, "pages")

    @staticmethod
    def _without_id(data: Document) -> Document:
        data = dict(data)
        data.pop("id", None)
        return sanitize(data)

    async def list_vocabulary(self) -> List[VocabularyItem]:
        docs = await self._store.list_documents(self._vocabulary(), order_by="addedAt", descending=True)
        return [VocabularyItem.from_dict(data, item_id=doc_id) for doc_id, data in docs]

    async def save_vocabulary(self, items: Sequence[VocabularyItem]) -> None:
        if not items:
            return
        await self._store.set_documents(
            self._vocabulary(), {item.id: sanitize(item.to_dict()) for item in items}
        )

    async def update_mastery(self, item_id: str, level: MasteryLevel) -> None:
        await self._store.update_document(
            self._vocabulary(),
            item_id,
            {"masteryLevel": level.value, "mastered": level is MasteryLevel.MASTERED},
        )

    async def delete_vocabulary(self, item_ids: Sequence[str]) -> None:
        await self._store.delete_documents(self._vocabulary(), item_ids)

    async def list_books(self) -> List[Book]:
        docs = await self._store.list_documents(self._books(), order_by="createdAt", descending=True)
        return [Book.from_dict(data, book_id=doc_id) for doc_id, data in docs]

    async def get_book(self, book_id: str) -> Optional[Book]:
        data = await self._store.get_document(self._books(), book_id)
        return Book.from_dict(data, book_id=book_id) if data is not None else None

    async def insert_book(self, book: Book) -> str:
        return await self._store.add_document(self._books(), self._without_id(book.to_dict()))

    async def delete_book(self, book_id: str) -> None:
        # Firestore does not cascade into sub-collections; pages stay behind.
        await self._store.delete_documents(self._books(), [book_id])

    async def list_pages(self, book_id: str) -> List[BookPage]:
        docs = await self._store.list_documents(self._pages(book_id), order_by="pageNumber")
        return [BookPage.from_dict(data, page_id=doc_id) for doc_id, data in docs]

    async def insert_page(self, page: BookPage) -> str:
        return await self._store.add_document(
            self._pages(page.book_id), self._without_id(page.to_dict())
        )

    async def increment_page_count(self, book_id: str) -> None:
        await self._store.increment_field(self._books(), book_id, "pageCount", 1)

    async def update_page_progress(
        self, book_id: str, page_id: str, sentence_index: int
    ) -> None:
        await self._store.update_document(
            self._pages(book_id), page_id, {"lastSentenceIndex": sentence_index}
        )
