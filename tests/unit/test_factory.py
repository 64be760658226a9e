"""Tests for coordinator factories."""

from unittest.mock import MagicMock

import pytest
from pydantic import SecretStr

from docaudit import AuditCoordinator, from_settings, with_couchdb, with_stores
from docaudit.config.settings import Settings
from docaudit.stores import CouchDBClient, InMemoryDocumentStore


class TestWithStores:
    """Tests for with_stores."""

    @pytest.mark.asyncio
    async def test_single_store_for_both_roles(self, store) -> None:
        """Audit records default to the primary store."""
        audit = with_stores(store, actor="admin")

        result = await audit.save_doc({"foo": "bar"})

        assert isinstance(audit, AuditCoordinator)
        record = await audit.get(result["id"])
        assert record.history[0].actor == "admin"
        assert (await store.get_doc(result["id"] + "-audit"))["type"] == "audit_record"

    @pytest.mark.asyncio
    async def test_actor_resolver(self, store) -> None:
        async def from_session() -> str:
            return "session-user"

        audit = with_stores(store, actor=from_session)
        records = await audit.log_only([{"_id": "1"}])

        assert records[0].history[0].actor == "session-user"

    def test_primary_without_audit_capability(self) -> None:
        primary = MagicMock(spec=["get_doc", "save_doc", "remove_doc", "bulk_docs"])
        with pytest.raises(TypeError):
            with_stores(primary, actor="admin")

    def test_explicit_audit_store(self) -> None:
        primary = MagicMock(spec=["get_doc", "save_doc", "remove_doc", "bulk_docs"])
        audit = with_stores(primary, actor="admin", audit_store=InMemoryDocumentStore())
        assert isinstance(audit, AuditCoordinator)

    def test_batch_size(self, store) -> None:
        assert with_stores(store, actor="admin", batch_size=5).batch_size == 5


class TestWithCouchDB:
    """Tests for with_couchdb."""

    def test_audit_next_to_docs(self) -> None:
        client = MagicMock(spec=CouchDBClient)
        client.base_url = "http://couch.test"

        with_couchdb(client, "medic", actor="admin")

        client.database.assert_called_once_with("medic")

    def test_separate_audit_db(self) -> None:
        client = MagicMock(spec=CouchDBClient)
        client.base_url = "http://couch.test"

        with_couchdb(client, "medic", actor="admin", audit_db="medic-audit")

        assert [call.args[0] for call in client.database.call_args_list] == [
            "medic",
            "medic-audit",
        ]


class TestFromSettings:
    """Tests for from_settings."""

    @pytest.mark.asyncio
    async def test_builds_from_settings(self) -> None:
        settings = Settings(
            audit={"batch_size": 10},
            storage={
                "couchdb": {
                    "url": "http://couch.test:5984/",
                    "username": "admin",
                    "password": SecretStr("pass"),
                },
            },
        )

        coordinator, client = from_settings("admin", settings)
        try:
            assert coordinator.batch_size == 10
            assert client.base_url == "http://couch.test:5984"
        finally:
            await client.close()
