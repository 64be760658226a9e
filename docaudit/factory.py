"""Factories binding stores and an actor into an AuditCoordinator.

Example usage:

    from docaudit.factory import with_couchdb
    from docaudit.stores import CouchDBClient

    async with CouchDBClient("http://localhost:5984") as client:
        audit = with_couchdb(client, "medic", actor="admin")
        await audit.save_doc({"type": "data_record", "foo": "bar"})
"""

from docaudit.audit.batching import MULTI_DOC_BATCH
from docaudit.audit.coordinator import AuditCoordinator
from docaudit.audit.identity import ActorResolver, as_actor_resolver
from docaudit.config import get_settings
from docaudit.config.settings import Settings
from docaudit.observability.logging import get_logger, setup_logging
from docaudit.stores.couchdb import CouchDBClient
from docaudit.stores.inmemory import InMemoryIdentifierAllocator
from docaudit.stores.store import AuditStore, IdentifierAllocator, PrimaryStore

logger = get_logger(__name__)


def with_stores(
    primary_store: PrimaryStore,
    actor: str | ActorResolver,
    allocator: IdentifierAllocator | None = None,
    audit_store: AuditStore | None = None,
    batch_size: int = MULTI_DOC_BATCH,
) -> AuditCoordinator:
    """Build a coordinator over arbitrary store implementations.

    Args:
        primary_store: Store holding the audited documents
        actor: Fixed user name, or a coroutine function resolving it
        allocator: Id source for new documents (default: random uuid4 hex)
        audit_store: Store for audit records; defaults to primary_store,
            which must then implement AuditStore too
        batch_size: Maximum keys or documents per store round-trip
    """
    if audit_store is None:
        if not isinstance(primary_store, AuditStore):
            raise TypeError(
                f"{type(primary_store).__name__} cannot hold audit records; "
                "pass audit_store explicitly"
            )
        audit_store = primary_store

    return AuditCoordinator(
        primary_store=primary_store,
        audit_store=audit_store,
        allocator=allocator or InMemoryIdentifierAllocator(),
        resolve_actor=as_actor_resolver(actor),
        batch_size=batch_size,
    )


def with_couchdb(
    client: CouchDBClient,
    docs_db: str,
    actor: str | ActorResolver,
    audit_db: str | None = None,
    batch_size: int = MULTI_DOC_BATCH,
) -> AuditCoordinator:
    """Build a coordinator over databases of one CouchDB server.

    Audit records go to ``audit_db`` when given, else next to the
    documents in ``docs_db``. New ids come from the server's ``_uuids``.
    """
    docs = client.database(docs_db)
    audit = client.database(audit_db) if audit_db else docs
    logger.info(
        "couchdb_audit_bound",
        url=client.base_url,
        docs_db=docs_db,
        audit_db=audit_db or docs_db,
    )
    return with_stores(
        docs,
        actor,
        allocator=client,
        audit_store=audit,
        batch_size=batch_size,
    )


def from_settings(
    actor: str | ActorResolver,
    settings: Settings | None = None,
) -> tuple[AuditCoordinator, CouchDBClient]:
    """Build a CouchDB-backed coordinator from configuration.

    Configures logging from the observability settings. The caller owns
    the returned client and must close it.
    """
    settings = settings or get_settings()
    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )

    couch = settings.storage.couchdb
    client = CouchDBClient(
        base_url=couch.url,
        username=couch.username,
        password=couch.password.get_secret_value() if couch.password else None,
        timeout=couch.timeout,
    )
    coordinator = with_couchdb(
        client,
        couch.docs_db,
        actor,
        audit_db=couch.audit_db,
        batch_size=settings.audit.batch_size,
    )
    return coordinator, client
