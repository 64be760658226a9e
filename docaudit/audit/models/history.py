"""HistoryEntry and AuditRecord models for the audit domain."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

AUDIT_ID_SUFFIX = "-audit"
AUDIT_RECORD_TYPE = "audit_record"

# Revision value stored in a snapshot until the next event reveals the real one
REVISION_PLACEHOLDER = "current"


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def audit_id_for(doc_id: str) -> str:
    """Derive the audit record id for a primary document id."""
    return f"{doc_id}{AUDIT_ID_SUFFIX}"


def revision_generation(rev: str | None) -> int | None:
    """Return the generation number of a ``<gen>-<hash>`` revision token.

    Returns None when the token is missing or has no numeric prefix.
    """
    if not rev:
        return None
    prefix, _, _ = str(rev).partition("-")
    try:
        return int(prefix)
    except ValueError:
        return None


def is_initial_revision(rev: str | None) -> bool:
    """Whether a revision token marks the first revision of a document."""
    return revision_generation(rev) == 1


class AuditAction(str, Enum):
    """Kind of change recorded by a history entry."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class HistoryEntry(BaseModel):
    """One line of a record's change history.

    The snapshot is a shallow copy of the primary document with its
    ``_rev`` replaced by the placeholder. Healing may later overwrite that
    ``_rev`` value; nothing else about an entry changes once written.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    action: AuditAction = Field(..., description="Change kind")
    actor: str | None = Field(
        default=None,
        alias="user",
        description="Acting user, None for synthesized backfill entries",
    )
    timestamp: datetime | None = Field(default=None, description="Event time (UTC)")
    snapshot: dict[str, Any] = Field(
        default_factory=dict,
        alias="doc",
        description="Document fields at event time",
    )

    @property
    def revision(self) -> str | None:
        """Revision recorded in the snapshot (placeholder until healed)."""
        return self.snapshot.get("_rev")


class AuditRecord(BaseModel):
    """Companion document holding the full change history of one record.

    Stored under ``<primary id>-audit``. Unknown fields read from the store
    are kept and written back untouched.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(..., alias="_id", description="Audit record id")
    rev: str | None = Field(
        default=None,
        alias="_rev",
        description="Store revision of the audit document itself",
    )
    type: str = Field(default=AUDIT_RECORD_TYPE, description="Type tag")
    history: list[HistoryEntry] = Field(
        default_factory=list, description="Entries, oldest first"
    )

    @classmethod
    def for_document(cls, doc_id: str) -> "AuditRecord":
        """Create an empty audit record for a primary document id."""
        return cls(id=audit_id_for(doc_id))

    @classmethod
    def from_doc(cls, doc: dict[str, Any]) -> "AuditRecord":
        """Build from a stored audit document."""
        return cls.model_validate(doc)

    def to_doc(self) -> dict[str, Any]:
        """Serialize to the stored document layout."""
        data = self.model_dump(by_alias=True, mode="json")
        if self.rev is None:
            data.pop("_rev", None)
        return data

    @property
    def latest(self) -> HistoryEntry | None:
        """Most recent history entry."""
        return self.history[-1] if self.history else None

    def append(
        self,
        action: AuditAction,
        actor: str | None,
        doc: dict[str, Any],
        timestamp: datetime | None = None,
    ) -> HistoryEntry:
        """Append an entry for ``doc``, healing the previous entry first.

        The previous entry's placeholder revision becomes ``doc``'s revision,
        since that is the revision the store assigned to the prior write.
        """
        if self.history:
            self.history[-1].snapshot["_rev"] = doc.get("_rev")

        snapshot = dict(doc)
        snapshot["_rev"] = REVISION_PLACEHOLDER
        entry = HistoryEntry(
            action=action,
            actor=actor,
            timestamp=timestamp or utc_now(),
            snapshot=snapshot,
        )
        self.history.append(entry)
        return entry
