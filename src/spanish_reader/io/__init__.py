"""I/O layer - Persistence backends and the gateway routing between them."""

from .analysis_history import AnalysisHistory
from .document_store import RemoteDocumentStore
from .identity import IdentityContext
from .in_memory_document_store import InMemoryDocumentStore
from .local_backend import LocalStorageBackend
from .local_store import LocalKeyValueStore
from .persistence_gateway import PersistenceGateway
from .remote_backend import RemoteStorageBackend, sanitize
from .storage_backend import StorageBackend

__all__ = [
    "AnalysisHistory",
    "IdentityContext",
    "InMemoryDocumentStore",
    "LocalKeyValueStore",
    "LocalStorageBackend",
    "PersistenceGateway",
    "RemoteDocumentStore",
    "RemoteStorageBackend",
    "StorageBackend",
    "sanitize",
]
