"""Storage backend configuration models."""

from pydantic import BaseModel, Field


class MongoConfig(BaseModel):
    """MongoDB connection settings.

    The audit trail is written to ``database`` unless a dedicated audit
    connection is configured with ``audit_connection_url``.
    """

    connection_url: str = Field(
        default="mongodb://localhost:27017",
        description="Primary MongoDB connection URL",
    )
    database: str = Field(
        default="test",
        min_length=1,
        description="Primary database name",
    )
    audit_connection_url: str | None = Field(
        default=None,
        description="Separate connection URL for audit collections",
    )
    audit_database: str | None = Field(
        default=None,
        description="Database on the audit connection (defaults to database)",
    )
    server_selection_timeout_ms: int = Field(
        default=30000,
        gt=0,
        description="How long the driver waits for a usable server",
    )


class StorageConfig(BaseModel):
    """Configuration for all storage backends."""

    mongodb: MongoConfig = Field(
        default_factory=MongoConfig,
        description="MongoDB host store",
    )
