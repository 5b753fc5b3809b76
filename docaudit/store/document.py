"""Document base model with the state tracking audited entities need."""

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

if TYPE_CHECKING:
    from docaudit.store.inmemory import InMemoryConnection, InMemoryModel


def new_document_id() -> str:
    """Generate a document identifier."""
    return uuid4().hex


class Document(BaseModel):
    """Base class for documents stored in an InMemoryModel.

    Subclasses declare their own fields. Every document carries the
    lifecycle fields stamped by the audit interceptor and tracks whether it
    was ever persisted and whether it changed since it was loaded.

    Example::

        class Invoice(Document):
            ts: int
            value: str | None = None
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_document_id, description="Identity")
    created_at: datetime | None = Field(default=None, description="First persist time")
    updated_at: datetime | None = Field(default=None, description="Last audited change")
    acting_user: str | None = Field(default=None, description="User behind the last change")
    action: str | None = Field(
        default=None,
        exclude=True,
        description="Label for the next history record, never persisted",
    )

    _is_new: bool = PrivateAttr(default=True)
    _loaded_state: dict[str, Any] | None = PrivateAttr(default=None)
    _model: Any = PrivateAttr(default=None)

    @property
    def is_new(self) -> bool:
        """True until the document has been persisted once."""
        return self._is_new

    @property
    def collection_name(self) -> str | None:
        return self._model.name if self._model is not None else None

    @property
    def connection(self) -> "InMemoryConnection | None":
        return self._model.connection if self._model is not None else None

    def is_modified(self) -> bool:
        """True if the document differs from its last loaded/persisted state."""
        if self._loaded_state is None:
            return True
        return self.to_plain() != self._loaded_state

    def to_plain(self) -> dict[str, Any]:
        """Plain mapping of persisted fields."""
        return self.model_dump()

    def bind(self, model: "InMemoryModel") -> None:
        """Attach the document to the model (collection) that owns it."""
        self._model = model

    def mark_persisted(self) -> None:
        """Record the current state as the stored state."""
        self._is_new = False
        self._loaded_state = self.to_plain()
