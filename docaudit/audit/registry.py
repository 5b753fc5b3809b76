"""Audit registry: resolves where each collection's history is written.

One registry is created at startup and shared by every interceptor. It
maps a logical collection name to the audit collection of the connection
that first asked for it. The cache is keyed by name only, so later
requests for the same name get the same handle even when they name a
different connection.
"""

from dataclasses import dataclass
from typing import Any

from docaudit.audit.models import AuditOptions
from docaudit.errors import ResolutionError
from docaudit.observability.logging import get_logger
from docaudit.observability.metrics import REGISTRY_LOOKUPS
from docaudit.store.protocols import AuditCollection, Connection

logger = get_logger(__name__)

DEFAULT_AUDIT_COLLECTION = "auditlog"


@dataclass(frozen=True)
class AuditRegistryEntry:
    """A resolved audit destination for one logical collection."""

    collection_name: str
    connection: Connection
    handle: AuditCollection


class AuditRegistry:
    """Lazily resolved, cached audit collection handles.

    Args:
        default_connection: Connection used when a resolution request does
            not name one. None means every request must carry a connection.
        audit_collection_name: Physical collection holding history records
            inside each connection's database.
    """

    def __init__(
        self,
        default_connection: Connection | None = None,
        audit_collection_name: str = DEFAULT_AUDIT_COLLECTION,
    ) -> None:
        if not audit_collection_name:
            raise ValueError("audit_collection_name must not be empty")
        self._default_connection = default_connection
        self._audit_collection_name = audit_collection_name
        self._entries: dict[str, AuditRegistryEntry] = {}

    @property
    def default_connection(self) -> Connection | None:
        return self._default_connection

    @property
    def audit_collection_name(self) -> str:
        return self._audit_collection_name

    async def resolve(
        self,
        collection_name: str,
        options: AuditOptions | None = None,
    ) -> AuditCollection:
        """Return the audit collection for ``collection_name``.

        On a cache hit the cached handle is returned and
        ``options.connection`` is ignored.

        Raises:
            ValueError: If collection_name is empty
            ResolutionError: If neither options nor the registry supply a
                connection
        """
        if not collection_name:
            raise ValueError("collection_name must not be empty")

        entry = self._entries.get(collection_name)
        if entry is not None:
            REGISTRY_LOOKUPS.labels(result="hit").inc()
            return entry.handle

        REGISTRY_LOOKUPS.labels(result="miss").inc()
        connection = self._pick_connection(collection_name, options)
        database = await connection.get_database()
        handle = database.collection(self._audit_collection_name)

        # A concurrent resolution may have finished while we were suspended;
        # the first stored entry is kept.
        entry = self._entries.setdefault(
            collection_name,
            AuditRegistryEntry(
                collection_name=collection_name,
                connection=connection,
                handle=handle,
            ),
        )
        logger.info(
            "audit_collection_resolved",
            collection=collection_name,
            audit_collection=entry.handle.name,
        )
        return entry.handle

    def _pick_connection(
        self, collection_name: str, options: AuditOptions | None
    ) -> Connection:
        if options is not None and options.connection is not None:
            return options.connection
        if self._default_connection is not None:
            return self._default_connection
        raise ResolutionError(
            f"No connection available to resolve the audit collection "
            f"for '{collection_name}'",
            collection_name=collection_name,
        )

    def get_entry(self, collection_name: str) -> AuditRegistryEntry | None:
        """Return the cached entry for a collection, if resolved."""
        return self._entries.get(collection_name)

    def clear(self) -> None:
        """Forget every resolved handle."""
        self._entries.clear()

    def __contains__(self, collection_name: Any) -> bool:
        return collection_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
