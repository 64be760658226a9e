"""History reconciliation for a single document.

Given a document about to be written, the actor, and the document's
existing audit record (if any), works out the audit record that must exist
after the write. When a document already has revisions but no audit trail,
its previously stored state is fetched and recorded first ("backfill").
"""

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from docaudit.audit.exceptions import BackfillFetchError, IdentifierAllocationError
from docaudit.audit.models import (
    AuditAction,
    AuditRecord,
    is_initial_revision,
    utc_now,
)
from docaudit.observability.logging import get_logger
from docaudit.observability.metrics import BACKFILL_FALLBACKS, HISTORY_ENTRIES
from docaudit.stores.store import IdentifierAllocator

logger = get_logger(__name__)

PriorFetcher = Callable[[str], Awaitable[dict[str, Any]]]


def resolve_action(
    doc: dict[str, Any], action_override: AuditAction | None = None
) -> AuditAction:
    """Action for a live entry: the override, else delete or update."""
    if action_override is not None:
        return AuditAction(action_override)
    if doc.get("_deleted"):
        return AuditAction.DELETE
    return AuditAction.UPDATE


class HistoryReconciler:
    """Computes the post-event audit record for one document.

    Each document is reconciled independently of the others in the same
    call, so the coordinator can run reconciliations concurrently.
    """

    def __init__(
        self,
        allocator: IdentifierAllocator,
        fetch_prior: PriorFetcher,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize reconciler.

        Args:
            allocator: Mints ids for documents that have none yet
            fetch_prior: Returns a document's currently stored state
            clock: Source of entry timestamps
        """
        self._allocator = allocator
        self._fetch_prior = fetch_prior
        self._clock = clock

    async def reconcile(
        self,
        doc: dict[str, Any],
        actor: str,
        existing: AuditRecord | None = None,
        action_override: AuditAction | None = None,
    ) -> AuditRecord:
        """Return the audit record describing ``doc`` after this event.

        ``existing`` is mutated in place when given. A document without an
        ``_id`` gets one assigned.

        Raises:
            IdentifierAllocationError: If a new id cannot be allocated
        """
        if not doc.get("_id"):
            doc["_id"] = await self._allocate_id()
            record = AuditRecord.for_document(doc["_id"])
            self._append(record, AuditAction.CREATE, actor, doc)
            return record

        if existing is not None:
            self._append(existing, resolve_action(doc, action_override), actor, doc)
            return existing

        record = AuditRecord.for_document(doc["_id"])
        rev = doc.get("_rev")
        if not rev or is_initial_revision(rev):
            self._append(record, AuditAction.CREATE, actor, doc)
            return record

        try:
            prior = await self._fetch_prior_state(doc["_id"])
        except BackfillFetchError as e:
            logger.warning(
                "backfill_fetch_failed",
                doc_id=str(doc["_id"]),
                rev=rev,
                error=str(e.cause or e),
            )
            BACKFILL_FALLBACKS.inc()
            self._append(record, AuditAction.CREATE, actor, doc)
            return record

        prior_rev = prior.get("_rev")
        backfill_action = (
            AuditAction.CREATE
            if not prior_rev or is_initial_revision(prior_rev)
            else AuditAction.UPDATE
        )
        self._append(record, backfill_action, None, prior, origin="backfill")
        self._append(record, resolve_action(doc, action_override), actor, doc)
        logger.info(
            "audit_history_backfilled",
            doc_id=str(doc["_id"]),
            prior_rev=prior_rev,
            rev=rev,
        )
        return record

    async def _allocate_id(self) -> str:
        try:
            ids = await self._allocator.allocate(1)
        except Exception as e:
            raise IdentifierAllocationError(
                message=f"Identifier allocation failed: {e}",
                cause=e,
            ) from e
        if not ids:
            raise IdentifierAllocationError(message="Identifier allocator returned no ids")
        return ids[0]

    async def _fetch_prior_state(self, doc_id: str) -> dict[str, Any]:
        try:
            return await self._fetch_prior(doc_id)
        except Exception as e:
            raise BackfillFetchError(
                message=f"Could not fetch stored state of {doc_id}: {e}",
                doc_id=str(doc_id),
                cause=e,
            ) from e

    def _append(
        self,
        record: AuditRecord,
        action: AuditAction,
        actor: str | None,
        doc: dict[str, Any],
        origin: str = "live",
    ) -> None:
        record.append(action, actor, doc, timestamp=self._clock())
        HISTORY_ENTRIES.labels(action=action.value, origin=origin).inc()
