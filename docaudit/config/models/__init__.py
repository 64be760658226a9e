"""Configuration model exports.

    from docaudit.config.models import AuditConfig, StorageConfig
"""

from docaudit.config.models.audit import AuditConfig
from docaudit.config.models.observability import LoggingConfig, ObservabilityConfig
from docaudit.config.models.storage import CouchDBConfig, StorageConfig

__all__ = [
    "AuditConfig",
    "CouchDBConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "StorageConfig",
]
