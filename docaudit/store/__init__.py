"""Host document store interfaces and adapters.

- protocols: what the audit layer needs from a store
- inmemory: hook-running in-memory store for tests and development
- mongodb: PyMongo asyncio adapter for audit destinations
"""

from docaudit.store.document import Document
from docaudit.store.inmemory import (
    InMemoryCollection,
    InMemoryConnection,
    InMemoryDatabase,
    InMemoryModel,
)
from docaudit.store.protocols import (
    AuditableEntity,
    AuditCollection,
    Connection,
    Database,
    HostCollection,
)

__all__ = [
    "AuditCollection",
    "AuditableEntity",
    "Connection",
    "Database",
    "Document",
    "HostCollection",
    "InMemoryCollection",
    "InMemoryConnection",
    "InMemoryDatabase",
    "InMemoryModel",
]
