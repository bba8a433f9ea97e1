"""Firestore implementation of the remote document store."""

from typing import List, Mapping, Optional, Sequence, Tuple

from google.cloud import firestore

from spanish_reader.io.document_store import CollectionPath, Document, RemoteDocumentStore


class FirestoreDocumentStore(RemoteDocumentStore):
    """
    Document store backed by Cloud Firestore's async client.

    Batched writes are split into chunks because Firestore rejects batches
    with more than 500 operations.
    """

    MAX_BATCH_SIZE = 500

    def __init__(
        self,
        client: Optional[firestore.AsyncClient] = None,
        project: Optional[str] = None,
    ):
        self._client = client or firestore.AsyncClient(project=project)

    def _collection(self, collection: CollectionPath) -> firestore.AsyncCollectionReference:
        return self._client.collection(*collection)

    async def list_documents(
        self,
        collection: CollectionPath,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Tuple[str, Document]]:
        query = self._collection(collection)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        return [(snapshot.id, snapshot.to_dict() or {}) async for snapshot in query.stream()]

    async def get_document(self, collection: CollectionPath, doc_id: str) -> Optional[Document]:
        snapshot = await self._collection(collection).document(doc_id).get()
        return snapshot.to_dict() if snapshot.exists else None

    async def add_document(self, collection: CollectionPath, data: Document) -> str:
        _, doc_ref = await self._collection(collection).add(data)
        return doc_ref.id

    async def set_documents(
        self, collection: CollectionPath, documents: Mapping[str, Document]
    ) -> None:
        col_ref = self._collection(collection)
        items = list(documents.items())
        for start in range(0, len(items), self.MAX_BATCH_SIZE):
            batch = self._client.batch()
            for doc_id, data in items[start:start + self.MAX_BATCH_SIZE]:
                batch.set(col_ref.document(doc_id), data)
            await batch.commit()

    async def update_document(
        self, collection: CollectionPath, doc_id: str, fields: Document
    ) -> None:
        await self._collection(collection).document(doc_id).update(fields)

    async def increment_field(
        self, collection: CollectionPath, doc_id: str, field: str, amount: int = 1
    ) -> None:
        await self._collection(collection).document(doc_id).update(
            {field: firestore.Increment(amount)}
        )

    async def delete_documents(self, collection: CollectionPath, doc_ids: Sequence[str]) -> None:
        col_ref = self._collection(collection)
        ids = list(doc_ids)
        for start in range(0, len(ids), self.MAX_BATCH_SIZE):
            batch = self._client.batch()
            for doc_id in ids[start:start + self.MAX_BATCH_SIZE]:
                batch.delete(col_ref.document(doc_id))
            await batch.commit()
