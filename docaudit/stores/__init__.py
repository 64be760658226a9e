"""Document stores for primary records and audit records."""

from docaudit.stores.couchdb import CouchDBClient, CouchDBDatabase
from docaudit.stores.inmemory import InMemoryDocumentStore, InMemoryIdentifierAllocator
from docaudit.stores.store import (
    AuditStore,
    DocumentConflictError,
    DocumentNotFoundError,
    IdentifierAllocator,
    PrimaryStore,
    StoreError,
)

__all__ = [
    "AuditStore",
    "CouchDBClient",
    "CouchDBDatabase",
    "DocumentConflictError",
    "DocumentNotFoundError",
    "IdentifierAllocator",
    "InMemoryDocumentStore",
    "InMemoryIdentifierAllocator",
    "PrimaryStore",
    "StoreError",
]
