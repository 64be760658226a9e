"""Store abstract interfaces.

The audit core only talks to these capability sets. A single concrete
store may implement several of them; the primary and audit stores may
even be the same object.
"""

from abc import ABC, abstractmethod
from typing import Any


class StoreError(Exception):
    """Base exception for document store failures."""

    def __init__(
        self,
        message: str,
        doc_id: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.message = message
        self.doc_id = doc_id
        self.status_code = status_code
        super().__init__(message)


class DocumentNotFoundError(StoreError):
    """Raised when a document does not exist or was deleted."""


class DocumentConflictError(StoreError):
    """Raised when a write carries a stale or missing revision."""


class PrimaryStore(ABC):
    """Abstract interface for the store holding the audited documents."""

    @abstractmethod
    async def get_doc(self, doc_id: str) -> dict[str, Any]:
        """Get the current state of a document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        pass

    @abstractmethod
    async def save_doc(self, doc: dict[str, Any]) -> dict[str, Any]:
        """Create or update a document, returning the store's result."""
        pass

    @abstractmethod
    async def remove_doc(self, doc_id: str, rev: str) -> dict[str, Any]:
        """Delete a document at the given revision."""
        pass

    @abstractmethod
    async def bulk_docs(
        self,
        docs: list[dict[str, Any]],
        options: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Write many documents, returning one result per document."""
        pass


class AuditStore(ABC):
    """Abstract interface for the store holding audit records."""

    @abstractmethod
    async def fetch_by_keys(self, keys: list[str]) -> list[dict[str, Any] | None]:
        """Fetch documents by id.

        Returns one entry per key, in key order: the stored document, or
        None when no live document exists for that key.
        """
        pass

    @abstractmethod
    async def bulk_docs(
        self,
        docs: list[dict[str, Any]],
        options: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Write many documents, returning one result per document.

        Rejected rows carry an ``error`` key instead of a new ``rev``.
        """
        pass


class IdentifierAllocator(ABC):
    """Abstract interface for minting new document ids."""

    @abstractmethod
    async def allocate(self, count: int = 1) -> list[str]:
        """Return ``count`` fresh identifiers."""
        pass
