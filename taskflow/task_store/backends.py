"""Document store backends: Firestore with a local file fallback.

Both backends expose the same small async surface used by
``TaskRepository``:

- ``query(collection, field, value)`` - equality filter, store order
- ``add(collection, fields)`` - returns the new document id
- ``update(collection, doc_id, fields)`` - partial update of an existing document
- ``delete(collection, doc_id)``

The Firestore SDK and the file I/O are blocking, so each call runs in a
worker thread via ``asyncio.to_thread``.
"""
from __future__ import annotations

import asyncio
import json
import logging
import threading
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from ..config import Settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StoredDocument:
    """A document id together with its field data."""

    id: str
    data: Dict[str, Any]


class DocumentStore(Protocol):
    name: str

    async def query(self, collection: str, field: str, value: Any) -> List[StoredDocument]: ...

    async def add(self, collection: str, fields: Dict[str, Any]) -> str: ...

    async def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None: ...

    async def delete(self, collection: str, doc_id: str) -> None: ...


# =============================================================================
# Firestore Storage
# =============================================================================

class FirestoreDocumentStore:
    """Document store backed by the firebase_admin Firestore client."""

    name = "firestore"

    def __init__(self, client=None) -> None:
        self._client = client

    @property
    def client(self):
        if self._client is None:
            from ..firestore import get_firestore_client

            self._client = get_firestore_client()
        return self._client

    async def query(self, collection: str, field: str, value: Any) -> List[StoredDocument]:
        return await asyncio.to_thread(self._query, collection, field, value)

    async def add(self, collection: str, fields: Dict[str, Any]) -> str:
        return await asyncio.to_thread(self._add, collection, fields)

    async def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._update, collection, doc_id, fields)

    async def delete(self, collection: str, doc_id: str) -> None:
        await asyncio.to_thread(self._delete, collection, doc_id)

    def _query(self, collection: str, field: str, value: Any) -> List[StoredDocument]:
        from google.cloud.firestore_v1.base_query import FieldFilter

        query = self.client.collection(collection).where(filter=FieldFilter(field, "==", value))
        return [StoredDocument(id=doc.id, data=doc.to_dict() or {}) for doc in query.stream()]

    def _add(self, collection: str, fields: Dict[str, Any]) -> str:
        _, doc_ref = self.client.collection(collection).add(fields)
        return doc_ref.id

    def _update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        self.client.collection(collection).document(doc_id).update(fields)

    def _delete(self, collection: str, doc_id: str) -> None:
        self.client.collection(collection).document(doc_id).delete()


# =============================================================================
# File Storage (Fallback)
# =============================================================================

class FileDocumentStore:
    """Document store kept in one JSONL file per collection.

    Used for local development and tests. Each line holds
    ``{"id": <doc id>, "data": {...}}``; file order is insertion order.
    """

    name = "file"

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)
        self._lock = threading.Lock()

    async def query(self, collection: str, field: str, value: Any) -> List[StoredDocument]:
        return await asyncio.to_thread(self._query, collection, field, value)

    async def add(self, collection: str, fields: Dict[str, Any]) -> str:
        return await asyncio.to_thread(self._add, collection, fields)

    async def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._update, collection, doc_id, fields)

    async def delete(self, collection: str, doc_id: str) -> None:
        await asyncio.to_thread(self._delete, collection, doc_id)

    def _collection_file(self, collection: str) -> Path:
        self._root.mkdir(parents=True, exist_ok=True)
        return self._root / f"{collection}.jsonl"

    def _read(self, collection: str) -> Dict[str, Dict[str, Any]]:
        path = self._collection_file(collection)
        docs: Dict[str, Dict[str, Any]] = {}
        if not path.exists():
            return docs
        with path.open("r", encoding="utf-8") as handle:
            for line in handle:
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                    docs[record["id"]] = record.get("data") or {}
                except (json.JSONDecodeError, KeyError, TypeError):
                    logger.warning("Skipping unreadable line in %s", path)
                    continue
        return docs

    def _write(self, collection: str, docs: Dict[str, Dict[str, Any]]) -> None:
        path = self._collection_file(collection)
        with path.open("w", encoding="utf-8") as handle:
            for doc_id, data in docs.items():
                handle.write(json.dumps({"id": doc_id, "data": data}))
                handle.write("\n")

    def _query(self, collection: str, field: str, value: Any) -> List[StoredDocument]:
        with self._lock:
            docs = self._read(collection)
        return [
            StoredDocument(id=doc_id, data=data)
            for doc_id, data in docs.items()
            if data.get(field) == value
        ]

    def _add(self, collection: str, fields: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        with self._lock:
            docs = self._read(collection)
            docs[doc_id] = dict(fields)
            self._write(collection, docs)
        return doc_id

    def _update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        with self._lock:
            docs = self._read(collection)
            if doc_id not in docs:
                raise KeyError(f"No document to update: {doc_id}")
            docs[doc_id].update(fields)
            self._write(collection, docs)

    def _delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            docs = self._read(collection)
            if docs.pop(doc_id, None) is not None:
                self._write(collection, docs)


def get_document_store(settings: Settings) -> DocumentStore:
    """Return the configured store.

    Firestore unless ``force_file_store`` is set; falls back to the file
    store only when the Firestore client cannot be created.
    """
    if settings.force_file_store:
        return FileDocumentStore(settings.store_dir)

    try:
        from ..firestore import get_firestore_client

        client = get_firestore_client()
    except Exception as exc:
        logger.warning(
            "Firestore unavailable, using local file store at %s: %s",
            settings.store_dir,
            exc,
        )
        return FileDocumentStore(settings.store_dir)
    return FirestoreDocumentStore(client)
