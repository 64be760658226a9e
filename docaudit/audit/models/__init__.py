"""Audit domain models.

Contains the Pydantic models for audit trails:
- AuditRecord, the per-document companion holding the history
- HistoryEntry, one change event with its document snapshot
"""

from docaudit.audit.models.history import (
    AUDIT_ID_SUFFIX,
    AUDIT_RECORD_TYPE,
    REVISION_PLACEHOLDER,
    AuditAction,
    AuditRecord,
    HistoryEntry,
    audit_id_for,
    is_initial_revision,
    revision_generation,
    utc_now,
)

__all__ = [
    "AUDIT_ID_SUFFIX",
    "AUDIT_RECORD_TYPE",
    "REVISION_PLACEHOLDER",
    "AuditAction",
    "AuditRecord",
    "HistoryEntry",
    "audit_id_for",
    "is_initial_revision",
    "revision_generation",
    "utc_now",
]
