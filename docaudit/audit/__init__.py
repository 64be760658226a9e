"""Audit trail engine.

Reconciles document histories, batches store round-trips, and coordinates
audited writes against a primary document store.
"""

from docaudit.audit.batching import MULTI_DOC_BATCH, chunked, run_batched
from docaudit.audit.coordinator import AuditCoordinator
from docaudit.audit.exceptions import (
    AuditError,
    AuditPersistError,
    BackfillFetchError,
    ExistingAuditFetchError,
    IdentifierAllocationError,
    IdentityResolutionError,
    PrimaryMutationError,
)
from docaudit.audit.identity import ActorResolver, as_actor_resolver, static_actor
from docaudit.audit.models import AuditAction, AuditRecord, HistoryEntry
from docaudit.audit.reconciler import HistoryReconciler

__all__ = [
    "MULTI_DOC_BATCH",
    "ActorResolver",
    "AuditAction",
    "AuditCoordinator",
    "AuditError",
    "AuditPersistError",
    "AuditRecord",
    "BackfillFetchError",
    "ExistingAuditFetchError",
    "HistoryEntry",
    "HistoryReconciler",
    "IdentifierAllocationError",
    "IdentityResolutionError",
    "PrimaryMutationError",
    "as_actor_resolver",
    "chunked",
    "run_batched",
    "static_actor",
]
