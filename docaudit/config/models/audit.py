"""Audit trail configuration model."""

from pydantic import BaseModel, Field


class AuditConfig(BaseModel):
    """Where history records go and how they are written."""

    collection_name: str = Field(
        default="auditlog",
        min_length=1,
        description="Physical collection holding history records in each database",
    )
    reserved_key_prefix: str = Field(
        default="$",
        min_length=1,
        max_length=1,
        description="Leading key character stripped from bulk-operation payloads",
    )
    write_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds before an audit insert is abandoned (None waits forever)",
    )
