"""docaudit: append-only audit trails for document stores.

Usage:
    from docaudit import with_stores
    from docaudit.stores import InMemoryDocumentStore

    audit = with_stores(InMemoryDocumentStore(), actor="admin")
    await audit.save_doc({"type": "data_record", "foo": "bar"})
"""

from docaudit.audit import (
    AuditAction,
    AuditCoordinator,
    AuditError,
    AuditRecord,
    HistoryEntry,
    static_actor,
)
from docaudit.factory import from_settings, with_couchdb, with_stores

__all__ = [
    "AuditAction",
    "AuditCoordinator",
    "AuditError",
    "AuditRecord",
    "HistoryEntry",
    "from_settings",
    "static_actor",
    "with_couchdb",
    "with_stores",
]
