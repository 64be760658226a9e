"""Exception hierarchy for audit calls.

Every failure of a coordinator call surfaces as one AuditError subclass.
The ``stage`` attribute names the step that failed, and the underlying
store or resolver exception is kept on ``cause`` (and chained).
"""


class AuditError(Exception):
    """Base exception for all audit failures."""

    stage: str = "audit"

    def __init__(
        self,
        message: str,
        doc_id: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.doc_id = doc_id
        self.cause = cause
        super().__init__(message)


class IdentityResolutionError(AuditError):
    """Raised when the acting user cannot be resolved."""

    stage = "identity"


class ExistingAuditFetchError(AuditError):
    """Raised when the batched read of existing audit records fails."""

    stage = "fetch_existing"


class BackfillFetchError(AuditError):
    """Raised when a document's prior state cannot be fetched for backfill.

    The reconciler recovers from this locally; it never reaches callers.
    """

    stage = "backfill"


class IdentifierAllocationError(AuditError):
    """Raised when a new document id cannot be allocated."""

    stage = "allocate"


class AuditPersistError(AuditError):
    """Raised when the batched write of audit records fails."""

    stage = "persist"


class PrimaryMutationError(AuditError):
    """Raised when the primary store mutation fails after auditing succeeded.

    The audit entries written for the call are not retracted.
    """

    stage = "primary"
