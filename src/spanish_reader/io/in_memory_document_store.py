"""In-memory document store for testing and offline sessions."""

import copy
import uuid
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from spanish_reader.io.document_store import CollectionPath, Document, RemoteDocumentStore


class InMemoryDocumentStore(RemoteDocumentStore):
    """
    Simple in-memory document store.

    Used for testing and session-level storage. No persistence.
    Documents are copied on the way in and out so callers cannot mutate
    stored state.
    """

    def __init__(self):
        # Structure: {collection_path: {doc_id: data}}
        self._collections: Dict[CollectionPath, Dict[str, Document]] = {}

    def _documents(self, collection: CollectionPath) -> Dict[str, Document]:
        return self._collections.setdefault(tuple(collection), {})

    async def list_documents(
        self,
        collection: CollectionPath,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Tuple[str, Document]]:
        docs = [(doc_id, copy.deepcopy(data)) for doc_id, data in self._documents(collection).items()]
        if order_by:
            # Like Firestore, documents missing the field are left out of ordered queries.
            docs = [d for d in docs if d[1].get(order_by) is not None]
            docs.sort(key=lambda d: d[1][order_by], reverse=descending)
        return docs

    async def get_document(self, collection: CollectionPath, doc_id: str) -> Optional[Document]:
        data = self._documents(collection).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    async def add_document(self, collection: CollectionPath, data: Document) -> str:
        doc_id = uuid.uuid4().hex
        self._documents(collection)[doc_id] = copy.deepcopy(data)
        return doc_id

    async def set_documents(
        self, collection: CollectionPath, documents: Mapping[str, Document]
    ) -> None:
        docs = self._documents(collection)
        for doc_id, data in documents.items():
            docs[doc_id] = copy.deepcopy(data)

    async def update_document(
        self, collection: CollectionPath, doc_id: str, fields: Document
    ) -> None:
        docs = self._documents(collection)
        if doc_id not in docs:
            raise KeyError(f"No document {doc_id} in {'/'.join(collection)}")
        docs[doc_id].update(copy.deepcopy(fields))

    async def increment_field(
        self, collection: CollectionPath, doc_id: str, field: str, amount: int = 1
    ) -> None:
        docs = self._documents(collection)
        if doc_id not in docs:
            raise KeyError(f"No document {doc_id} in {'/'.join(collection)}")
        docs[doc_id][field] = (docs[doc_id].get(field) or 0) + amount

    async def delete_documents(self, collection: CollectionPath, doc_ids: Sequence[str]) -> None:
        docs = self._documents(collection)
        for doc_id in doc_ids:
            docs.pop(doc_id, None)
