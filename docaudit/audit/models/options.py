"""Options accepted when attaching an interceptor."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from docaudit.errors import ConfigurationError


class AuditOptions(BaseModel):
    """Attachment-time options.

    ``connection`` selects the connection whose database holds the audit
    collection. It only matters the first time a collection name is
    resolved; later resolutions reuse the cached handle.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    connection: Any | None = Field(
        default=None,
        description="Connection used to resolve the audit collection",
    )

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> "AuditOptions":
        """Build options from a plain mapping, rejecting unknown keys."""
        try:
            return cls.model_validate(dict(options or {}))
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid audit options: {exc}") from exc
