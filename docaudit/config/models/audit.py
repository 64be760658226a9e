"""Audit engine configuration models."""

from pydantic import BaseModel, Field

from docaudit.audit.batching import MULTI_DOC_BATCH


class AuditConfig(BaseModel):
    """Audit engine configuration."""

    batch_size: int = Field(
        default=MULTI_DOC_BATCH,
        gt=0,
        description="Maximum keys or documents per store round-trip",
    )
