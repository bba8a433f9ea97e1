"""Remote document store abstraction - plugin interface for per-user cloud storage."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

CollectionPath = Tuple[str, ...]
Document = Dict[str, Any]


class RemoteDocumentStore(ABC):
    """
    Abstract hierarchical document store.

    Collections are addressed by a path of alternating collection/document
    segments, e.g. ``("users", uid, "books", book_id, "pages")``.
    Implementations (FirestoreDocumentStore, InMemoryDocumentStore) handle the
    transport; they raise on failure.
    """

    @abstractmethod
    async def list_documents(
        self,
        collection: CollectionPath,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Tuple[str, Document]]:
        """Return ``(document_id, data)`` pairs, optionally ordered by a field."""
        pass

    @abstractmethod
    async def get_document(self, collection: CollectionPath, doc_id: str) -> Optional[Document]:
        pass

    @abstractmethod
    async def add_document(self, collection: CollectionPath, data: Document) -> str:
        """Create a document with a store-assigned identifier and return it."""
        pass

    @abstractmethod
    async def set_documents(
        self, collection: CollectionPath, documents: Mapping[str, Document]
    ) -> None:
        """Write several documents with caller-chosen identifiers in one batch."""
        pass

    @abstractmethod
    async def update_document(
        self, collection: CollectionPath, doc_id: str, fields: Document
    ) -> None:
        """Merge ``fields`` into an existing document."""
        pass

    @abstractmethod
    async def increment_field(
        self, collection: CollectionPath, doc_id: str, field: str, amount: int = 1
    ) -> None:
        """Atomically add ``amount`` to a numeric field."""
        pass

    @abstractmethod
    async def delete_documents(self, collection: CollectionPath, doc_ids: Sequence[str]) -> None:
        pass
