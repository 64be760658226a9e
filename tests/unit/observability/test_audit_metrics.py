"""Tests for Prometheus metrics emitted by audit calls."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from prometheus_client import REGISTRY

from docaudit.audit.coordinator import AuditCoordinator
from docaudit.audit.exceptions import AuditPersistError
from docaudit.audit.identity import static_actor
from docaudit.observability.metrics import (
    AUDIT_CALL_LATENCY,
    AUDIT_CALLS,
    BACKFILL_FALLBACKS,
    BATCH_CHUNKS,
    ERRORS,
    HISTORY_ENTRIES,
)
from docaudit.stores.store import StoreError


def sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestMetricDefinitions:
    """Metrics are registered and accept their labels."""

    def test_counters_accept_labels(self) -> None:
        AUDIT_CALLS.labels(operation="save_doc", status="ok")
        HISTORY_ENTRIES.labels(action="create", origin="live")
        BATCH_CHUNKS.labels(kind="read")
        ERRORS.labels(stage="persist")
        AUDIT_CALL_LATENCY.labels(operation="save_doc")
        assert BACKFILL_FALLBACKS is not None


class TestCoordinatorMetrics:
    """Counters move when the coordinator runs."""

    @pytest.mark.asyncio
    async def test_successful_save(self, store, allocator) -> None:
        coordinator = AuditCoordinator(store, store, allocator, static_actor("x"))
        calls_before = sample(
            "docaudit_calls_total", {"operation": "save_doc", "status": "ok"}
        )
        creates_before = sample(
            "docaudit_history_entries_total", {"action": "create", "origin": "live"}
        )
        writes_before = sample("docaudit_batch_chunks_total", {"kind": "write"})

        await coordinator.save_doc({"foo": "bar"})

        assert sample(
            "docaudit_calls_total", {"operation": "save_doc", "status": "ok"}
        ) == calls_before + 1
        assert sample(
            "docaudit_history_entries_total", {"action": "create", "origin": "live"}
        ) == creates_before + 1
        assert sample("docaudit_batch_chunks_total", {"kind": "write"}) == writes_before + 1

    @pytest.mark.asyncio
    async def test_backfill_counted(self, store, allocator) -> None:
        coordinator = AuditCoordinator(store, store, allocator, static_actor("x"))
        first = await store.save_doc({"_id": "legacy"})
        before = sample(
            "docaudit_history_entries_total", {"action": "create", "origin": "backfill"}
        )

        await coordinator.log_only(
            [{"_id": "legacy", "_rev": first["rev"].replace("1-", "2-", 1)}]
        )

        assert sample(
            "docaudit_history_entries_total", {"action": "create", "origin": "backfill"}
        ) == before + 1

    @pytest.mark.asyncio
    async def test_backfill_fallback_counted(self, store, allocator) -> None:
        coordinator = AuditCoordinator(store, store, allocator, static_actor("x"))
        before = sample("docaudit_backfill_fallbacks_total")

        await coordinator.log_only([{"_id": "never-stored", "_rev": "3-abc"}])

        assert sample("docaudit_backfill_fallbacks_total") == before + 1

    @pytest.mark.asyncio
    async def test_failure_counted_by_stage(self, store, allocator) -> None:
        audit_store = MagicMock()
        audit_store.fetch_by_keys = AsyncMock(return_value=[None])
        audit_store.bulk_docs = AsyncMock(side_effect=StoreError("ERR1"))
        coordinator = AuditCoordinator(store, audit_store, allocator, static_actor("x"))
        errors_before = sample("docaudit_errors_total", {"stage": "persist"})
        failed_before = sample(
            "docaudit_calls_total", {"operation": "save_doc", "status": "error"}
        )

        with pytest.raises(AuditPersistError):
            await coordinator.save_doc({"_id": "1"})

        assert sample("docaudit_errors_total", {"stage": "persist"}) == errors_before + 1
        assert sample(
            "docaudit_calls_total", {"operation": "save_doc", "status": "error"}
        ) == failed_before + 1
