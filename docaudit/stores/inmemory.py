"""In-memory implementations of the store interfaces."""

import copy
from typing import Any
from uuid import uuid4

from docaudit.audit.models import revision_generation
from docaudit.stores.store import (
    AuditStore,
    DocumentConflictError,
    DocumentNotFoundError,
    IdentifierAllocator,
    PrimaryStore,
)


class InMemoryDocumentStore(PrimaryStore, AuditStore):
    """In-memory document store for testing and development.

    Follows CouchDB revision rules: every write bumps the ``<gen>-<hash>``
    revision, updates must carry the current revision, and deletions leave
    a tombstone that reads as not found. Documents are deep-copied on the
    way in and out so callers never share state with the store.
    Not suitable for production use.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._docs: dict[str, dict[str, Any]] = {}

    def _next_rev(self, current_rev: str | None) -> str:
        generation = revision_generation(current_rev) or 0
        return f"{generation + 1}-{uuid4().hex}"

    def _live(self, doc_id: str) -> dict[str, Any] | None:
        stored = self._docs.get(doc_id)
        if stored is None or stored.get("_deleted"):
            return None
        return stored

    def _write(self, doc: dict[str, Any]) -> dict[str, Any]:
        doc_id = doc.get("_id") or uuid4().hex
        current = self._docs.get(doc_id)
        current_rev = current["_rev"] if current else None

        if current is not None:
            live = not current.get("_deleted")
            if (live or doc.get("_rev")) and doc.get("_rev") != current_rev:
                raise DocumentConflictError(
                    f"Document update conflict for {doc_id}", doc_id=doc_id
                )

        stored = copy.deepcopy(doc)
        stored["_id"] = doc_id
        stored["_rev"] = self._next_rev(current_rev)
        if stored.get("_deleted"):
            stored = {"_id": doc_id, "_rev": stored["_rev"], "_deleted": True}
        self._docs[doc_id] = stored
        return {"ok": True, "id": doc_id, "rev": stored["_rev"]}

    # Primary store operations
    async def get_doc(self, doc_id: str) -> dict[str, Any]:
        """Get a live document by id."""
        stored = self._live(doc_id)
        if stored is None:
            raise DocumentNotFoundError(f"Document {doc_id} not found", doc_id=doc_id)
        return copy.deepcopy(stored)

    async def save_doc(self, doc: dict[str, Any]) -> dict[str, Any]:
        """Create or update a document."""
        return self._write(doc)

    async def remove_doc(self, doc_id: str, rev: str) -> dict[str, Any]:
        """Delete a document, leaving a tombstone."""
        if self._live(doc_id) is None:
            raise DocumentNotFoundError(f"Document {doc_id} not found", doc_id=doc_id)
        return self._write({"_id": doc_id, "_rev": rev, "_deleted": True})

    async def bulk_docs(
        self,
        docs: list[dict[str, Any]],
        options: dict[str, Any] | None = None,  # noqa: ARG002
    ) -> list[dict[str, Any]]:
        """Write many documents, reporting conflicts per row.

        Options such as ``all_or_nothing`` are accepted and ignored.
        """
        results = []
        for doc in docs:
            try:
                results.append(self._write(doc))
            except DocumentConflictError as e:
                results.append({
                    "id": e.doc_id,
                    "error": "conflict",
                    "reason": "Document update conflict.",
                })
        return results

    # Audit store operations
    async def fetch_by_keys(self, keys: list[str]) -> list[dict[str, Any] | None]:
        """Fetch live documents by id, None for missing or deleted ones."""
        results: list[dict[str, Any] | None] = []
        for key in keys:
            stored = self._live(key)
            results.append(copy.deepcopy(stored) if stored is not None else None)
        return results


class InMemoryIdentifierAllocator(IdentifierAllocator):
    """Allocates random uuid4 hex identifiers."""

    async def allocate(self, count: int = 1) -> list[str]:
        """Return ``count`` fresh identifiers."""
        if count < 1:
            raise ValueError(f"Identifier count must be positive, got {count}")
        return [uuid4().hex for _ in range(count)]
