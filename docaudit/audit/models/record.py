"""HistoryRecord and BulkOperation models."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from docaudit.audit.models.operation import OperationKind
from docaudit.store.protocols import HostCollection


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class HistoryRecord(BaseModel):
    """Immutable audit record of one mutation.

    Field aliases are the persisted layout (``ts``, ``operation``,
    ``location``, ``document``, ``user``, ``action``, ``selector``,
    ``partial``) and must stay stable for existing audit collections.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        use_enum_values=True,
    )

    timestamp: datetime = Field(..., alias="ts", description="Mutation time")
    operation: OperationKind = Field(..., description="Mutation kind")
    location: str = Field(..., min_length=1, description="Logical collection name")
    document: dict[str, Any] = Field(
        ..., description="Entity snapshot or bulk update payload"
    )
    user: str | None = Field(default=None, description="Acting user")
    action: str | None = Field(default=None, description="Free-text action label")
    selector: dict[str, Any] | None = Field(
        default=None, description="Filter of a set-based operation"
    )
    partial: bool | None = Field(
        default=None, description="True when the snapshot is known-incomplete"
    )

    def to_document(self) -> dict[str, Any]:
        """Serialize to the persisted layout, omitting absent optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass
class BulkOperation:
    """Source of a selector-mode record.

    Describes a set-based update or delete that never loads individual
    documents. ``collection`` is the owning host collection, attached just
    before the record is built; it is never serialized.
    """

    selector: dict[str, Any]
    update: dict[str, Any] = field(default_factory=dict)
    acting_user: str | None = None
    action: str | None = None
    collection: HostCollection | None = None
