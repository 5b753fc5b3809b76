"""Interfaces the host document store must provide.

The audit layer never talks to a driver directly. Anything that satisfies
these protocols can be audited: the bundled in-memory store, the MongoDB
adapter, or an application's own persistence layer.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class AuditCollection(Protocol):
    """Append-only destination for history records."""

    @property
    def name(self) -> str: ...

    async def insert(self, record: dict[str, Any]) -> Any:
        """Insert one record. Failures propagate as the store's own errors."""
        ...


class Database(Protocol):
    """Database handle exposed by a connection."""

    def collection(self, name: str) -> AuditCollection: ...


class Connection(Protocol):
    """A physical connection to a document store."""

    async def get_database(self) -> Database:
        """Return the connection's database handle, connecting if needed."""
        ...


@runtime_checkable
class AuditableEntity(Protocol):
    """A document whose mutations are audited.

    ``created_at``, ``updated_at`` and ``acting_user`` are part of the
    entity's persisted schema. ``action`` is a transient label carried into
    the next history record only.
    """

    id: Any
    created_at: datetime | None
    updated_at: datetime | None
    acting_user: str | None
    action: str | None

    @property
    def is_new(self) -> bool: ...

    @property
    def collection_name(self) -> str | None: ...

    @property
    def connection(self) -> Connection | None: ...

    def is_modified(self) -> bool: ...

    def to_plain(self) -> dict[str, Any]: ...


# Hooks resume the host operation by returning and abort it by raising
LifecycleHook = Callable[[Any], Awaitable[None]]


class HostCollection(Protocol):
    """Entity-type descriptor an interceptor attaches to."""

    @property
    def name(self) -> str: ...

    @property
    def connection(self) -> Connection | None: ...

    def before_persist(self, hook: LifecycleHook) -> None: ...

    def before_remove(self, hook: LifecycleHook) -> None: ...
