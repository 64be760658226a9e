"""Audit coordinator: audited writes against a primary document store.

Every mutating call first writes the audit records describing the change
and only then touches the primary store. If auditing fails, the primary
store is never called. If the primary write fails after auditing succeeded,
the audit entries stay in place.
"""

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import Any

from docaudit.audit.batching import MULTI_DOC_BATCH, run_batched
from docaudit.audit.exceptions import (
    AuditError,
    AuditPersistError,
    ExistingAuditFetchError,
    IdentityResolutionError,
    PrimaryMutationError,
)
from docaudit.audit.identity import ActorResolver
from docaudit.audit.models import AuditAction, AuditRecord, audit_id_for
from docaudit.audit.reconciler import HistoryReconciler
from docaudit.observability.logging import get_logger
from docaudit.observability.metrics import AUDIT_CALL_LATENCY, AUDIT_CALLS, ERRORS
from docaudit.stores.store import AuditStore, IdentifierAllocator, PrimaryStore

logger = get_logger(__name__)


class AuditCoordinator:
    """Writes audit trails alongside primary document mutations.

    Example:
        >>> audit = AuditCoordinator(db, db, allocator, static_actor("admin"))
        >>> await audit.save_doc({"type": "data_record", "foo": "bar"})
        >>> record = await audit.get(doc_id)
    """

    def __init__(
        self,
        primary_store: PrimaryStore,
        audit_store: AuditStore,
        allocator: IdentifierAllocator,
        resolve_actor: ActorResolver,
        batch_size: int = MULTI_DOC_BATCH,
    ) -> None:
        """Initialize coordinator.

        Args:
            primary_store: Store holding the audited documents
            audit_store: Store holding audit records (may be primary_store)
            allocator: Mints ids for documents saved without one
            resolve_actor: Coroutine function returning the acting user
            batch_size: Maximum keys or documents per store round-trip
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._primary = primary_store
        self._audit = audit_store
        self._resolve_actor = resolve_actor
        self._batch_size = batch_size
        self._reconciler = HistoryReconciler(allocator, primary_store.get_doc)

    @property
    def batch_size(self) -> int:
        """Maximum keys or documents per store round-trip."""
        return self._batch_size

    async def log_only(
        self,
        docs: list[dict[str, Any]],
        action_override: AuditAction | None = None,
    ) -> list[AuditRecord]:
        """Write audit records for ``docs`` without touching the primary store.

        Documents without an ``_id`` are assigned one.

        Returns:
            The persisted audit records, in input order
        """
        async with self._track("log_only"):
            return await self._audit_docs(docs, action_override)

    async def save_doc(self, doc: dict[str, Any]) -> dict[str, Any]:
        """Audit and save a single document."""
        async with self._track("save_doc"):
            await self._audit_docs([doc])
            return await self._mutate_primary(
                "save_doc", self._primary.save_doc(doc), doc_id=doc.get("_id")
            )

    async def bulk_save(
        self,
        docs: list[dict[str, Any]],
        options: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Audit and save many documents.

        Args:
            docs: Documents to save; saved in the given order
            options: Passed through to the primary store (e.g. all_or_nothing)
        """
        async with self._track("bulk_save"):
            await self._audit_docs(docs)
            return await self._mutate_primary(
                "bulk_save", self._primary.bulk_docs(docs, options or {})
            )

    async def remove_doc(self, doc: dict[str, Any]) -> dict[str, Any]:
        """Audit the deletion of a document, then delete it."""
        async with self._track("remove_doc"):
            await self._audit_docs([doc], AuditAction.DELETE)
            return await self._mutate_primary(
                "remove_doc",
                self._primary.remove_doc(doc["_id"], doc.get("_rev")),
                doc_id=doc["_id"],
            )

    async def get(self, doc_id: str) -> AuditRecord | None:
        """Get the audit record for a primary document id.

        Returns:
            The audit record, or None if the document was never audited
        """
        async with self._track("get"):
            records = await self._fetch_existing([audit_id_for(doc_id)])
            return records.get(audit_id_for(doc_id))

    async def _audit_docs(
        self,
        docs: list[dict[str, Any]],
        action_override: AuditAction | None = None,
    ) -> list[AuditRecord]:
        actor = await self._actor()

        audit_ids = [audit_id_for(doc["_id"]) for doc in docs if doc.get("_id")]
        existing = await self._fetch_existing(audit_ids) if audit_ids else {}

        # Fan out one reconciliation per document and wait for all of them
        results = await asyncio.gather(
            *[
                self._reconciler.reconcile(
                    doc,
                    actor,
                    existing.get(audit_id_for(doc["_id"])) if doc.get("_id") else None,
                    action_override,
                )
                for doc in docs
            ],
            return_exceptions=True,
        )
        for doc, result in zip(docs, results, strict=True):
            if isinstance(result, BaseException):
                self._record_failure(result, doc_id=doc.get("_id"))
                raise result

        records: list[AuditRecord] = list(results)  # type: ignore[arg-type]
        await self._persist(records)
        return records

    async def _actor(self) -> str:
        try:
            return await self._resolve_actor()
        except Exception as e:
            error = IdentityResolutionError(
                message=f"Could not resolve acting user: {e}", cause=e
            )
            self._record_failure(error)
            raise error from e

    async def _fetch_existing(self, audit_ids: list[str]) -> dict[str, AuditRecord]:
        try:
            rows = await run_batched(
                audit_ids, self._batch_size, self._audit.fetch_by_keys, kind="read"
            )
            records = [AuditRecord.from_doc(row) for row in rows if row is not None]
        except Exception as e:
            error = ExistingAuditFetchError(
                message=f"Could not fetch existing audit records: {e}", cause=e
            )
            self._record_failure(error)
            raise error from e

        return {record.id: record for record in records}

    async def _persist(self, records: list[AuditRecord]) -> None:
        docs = [record.to_doc() for record in records]
        try:
            results = await run_batched(
                docs, self._batch_size, self._audit.bulk_docs, kind="write"
            )
        except Exception as e:
            error = AuditPersistError(
                message=f"Could not persist audit records: {e}", cause=e
            )
            self._record_failure(error)
            raise error from e

        for result in results:
            if isinstance(result, dict) and result.get("error"):
                logger.warning(
                    "audit_record_rejected",
                    audit_id=result.get("id"),
                    error=result.get("error"),
                    reason=result.get("reason"),
                )

        logger.info(
            "audit_records_persisted",
            count=len(records),
            audit_ids=[record.id for record in records],
        )

    async def _mutate_primary(
        self, operation: str, mutation: Awaitable[Any], doc_id: str | None = None
    ) -> Any:
        try:
            return await mutation
        except Exception as e:
            error = PrimaryMutationError(
                message=f"Primary store {operation} failed after auditing: {e}",
                doc_id=doc_id,
                cause=e,
            )
            self._record_failure(error)
            raise error from e

    def _record_failure(self, error: BaseException, doc_id: str | None = None) -> None:
        stage = error.stage if isinstance(error, AuditError) else "unknown"
        ERRORS.labels(stage=stage).inc()
        logger.error(
            "audit_failed",
            stage=stage,
            doc_id=str(doc_id) if doc_id is not None else None,
            error=str(error),
        )

    @asynccontextmanager
    async def _track(self, operation: str) -> AsyncIterator[None]:
        started = time.perf_counter()
        status = "ok"
        try:
            yield
        except Exception:
            status = "error"
            raise
        finally:
            AUDIT_CALL_LATENCY.labels(operation=operation).observe(
                time.perf_counter() - started
            )
            AUDIT_CALLS.labels(operation=operation, status=status).inc()
