"""Storage backend configuration models."""

from pydantic import BaseModel, Field, SecretStr


class CouchDBConfig(BaseModel):
    """CouchDB server and database configuration.

    Note: credentials should come from environment variables
    (DOCAUDIT_STORAGE__COUCHDB__PASSWORD), NOT from config files.
    """

    url: str = Field(
        default="http://localhost:5984",
        description="CouchDB server URL",
    )
    docs_db: str = Field(
        default="medic",
        description="Database holding the audited documents",
    )
    audit_db: str | None = Field(
        default=None,
        description="Database holding audit records (defaults to docs_db)",
    )
    username: str | None = Field(default=None, description="Basic auth user")
    password: SecretStr | None = Field(default=None, description="Basic auth password")
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds",
    )


class StorageConfig(BaseModel):
    """Configuration for all storage backends."""

    couchdb: CouchDBConfig = Field(
        default_factory=CouchDBConfig,
        description="CouchDB backend",
    )
