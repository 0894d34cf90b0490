"""
In-memory document store

Stands in for the hosted document database: documents grouped into
collections, per-document snapshot listeners and atomic write batches.
Every read and write yields to the event loop like a real network call.
"""

import asyncio
import copy
import itertools
import logging
import uuid
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

DocumentListener = Callable[[Optional[dict[str, Any]]], None]


class StoreError(Exception):
    """Base exception for document store errors"""
    pass


class DocumentNotFound(StoreError):
    """Update targeted a document that does not exist"""

    def __init__(self, collection: str, doc_id: str):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"Document {collection}/{doc_id} not found")


class WriteBatch:
    """
    Group of document updates that commit together.

    Either every update is applied or none is.
    """

    def __init__(self, store: "DocumentStore"):
        self._store = store
        self._updates: list[tuple[str, str, dict[str, Any]]] = []
        self._committed = False

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> "WriteBatch":
        """Stage a partial update"""
        if self._committed:
            raise StoreError("Batch already committed")
        self._updates.append((collection, doc_id, fields))
        return self

    def __len__(self) -> int:
        return len(self._updates)

    async def commit(self) -> None:
        """Apply all staged updates atomically"""
        if self._committed:
            raise StoreError("Batch already committed")
        self._committed = True
        await self._store._apply(self._updates)


class DocumentStore:
    """In-memory document database with live document subscriptions"""

    def __init__(self):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._listeners: dict[tuple[str, str], dict[int, DocumentListener]] = {}
        self._listener_ids = itertools.count(1)

    # ==================== Reads ====================

    async def get_document(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        """Get a document by ID, or None if it does not exist"""
        await asyncio.sleep(0)
        return self._snapshot(collection, doc_id)

    async def list_documents(self, collection: str) -> list[tuple[str, dict[str, Any]]]:
        """List every document in a collection as (id, data) pairs"""
        await asyncio.sleep(0)
        docs = self._collections.get(collection, {})
        return [(doc_id, copy.deepcopy(data)) for doc_id, data in docs.items()]

    # ==================== Writes ====================

    async def add_document(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document with a generated ID"""
        doc_id = uuid.uuid4().hex[:20]
        await self.set_document(collection, doc_id, data)
        return doc_id

    async def set_document(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or replace a document"""
        await asyncio.sleep(0)
        self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)
        self._notify(collection, doc_id)

    async def update_document(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Merge fields into an existing document"""
        await self._apply([(collection, doc_id, fields)])

    async def delete_document(self, collection: str, doc_id: str) -> bool:
        """Delete a document; listeners receive None"""
        await asyncio.sleep(0)
        if self._collections.get(collection, {}).pop(doc_id, None) is None:
            return False
        self._notify(collection, doc_id)
        return True

    def batch(self) -> WriteBatch:
        """Start a new atomic write batch"""
        return WriteBatch(self)

    async def _apply(self, updates: list[tuple[str, str, dict[str, Any]]]) -> None:
        await asyncio.sleep(0)

        # Validate everything before touching anything
        for collection, doc_id, _ in updates:
            if doc_id not in self._collections.get(collection, {}):
                raise DocumentNotFound(collection, doc_id)

        for collection, doc_id, fields in updates:
            self._collections[collection][doc_id].update(copy.deepcopy(fields))

        for collection, doc_id in dict.fromkeys((c, d) for c, d, _ in updates):
            self._notify(collection, doc_id)

    # ==================== Subscriptions ====================

    def subscribe_document(
        self,
        collection: str,
        doc_id: str,
        listener: DocumentListener,
    ) -> Callable[[], None]:
        """
        Listen to a single document.

        The listener receives the current snapshot straight away and again
        after every write. Returns an unsubscribe function.
        """
        key = (collection, doc_id)
        listener_id = next(self._listener_ids)
        self._listeners.setdefault(key, {})[listener_id] = listener
        self._deliver(listener, self._snapshot(collection, doc_id))

        def unsubscribe() -> None:
            listeners = self._listeners.get(key)
            if listeners is None:
                return
            listeners.pop(listener_id, None)
            if not listeners:
                del self._listeners[key]

        return unsubscribe

    def listener_count(self, collection: str, doc_id: str) -> int:
        """Number of live listeners on a document"""
        return len(self._listeners.get((collection, doc_id), {}))

    def _notify(self, collection: str, doc_id: str) -> None:
        for listener in list(self._listeners.get((collection, doc_id), {}).values()):
            self._deliver(listener, self._snapshot(collection, doc_id))

    @staticmethod
    def _deliver(listener: DocumentListener, snapshot: Optional[dict[str, Any]]) -> None:
        try:
            listener(snapshot)
        except Exception:
            logger.exception("Document listener raised")

    def _snapshot(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        doc = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None
