"""MongoDB adapter for audit destinations.

Wraps PyMongo's asyncio client in the Connection/Database/AuditCollection
protocols so history records can be appended to a real server. Entity
state tracking (new/modified) stays with the application's document layer.
"""

from collections.abc import Mapping
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase

from docaudit.config.models.storage import MongoConfig
from docaudit.observability.logging import get_logger

logger = get_logger(__name__)


class MongoAuditCollection:
    """Append-only view over a MongoDB collection."""

    def __init__(self, collection: AsyncCollection[Any]) -> None:
        self._collection = collection

    @property
    def name(self) -> str:
        return self._collection.name

    async def insert(self, record: Mapping[str, Any]) -> Any:
        """Insert one record and return its ``_id``.

        The record is copied first since the driver writes ``_id`` into the
        mapping it is given.
        """
        result = await self._collection.insert_one(dict(record))
        return result.inserted_id


class MongoDatabase:
    """Database handle handing out audit collections."""

    def __init__(self, database: AsyncDatabase[Any]) -> None:
        self._database = database

    @property
    def name(self) -> str:
        return self._database.name

    def collection(self, name: str) -> MongoAuditCollection:
        return MongoAuditCollection(self._database[name])


class MongoConnection:
    """A MongoDB client bound to one database.

    The client is created on first use unless one is injected.

    Args:
        connection_url: MongoDB URI
        database: Database holding the audit collections
        client: Existing AsyncMongoClient to reuse
        **client_options: Extra keyword arguments for AsyncMongoClient
    """

    def __init__(
        self,
        connection_url: str,
        database: str,
        *,
        client: AsyncMongoClient[Any] | None = None,
        **client_options: Any,
    ) -> None:
        self._connection_url = connection_url
        self._database_name = database
        self._client = client
        self._client_options = client_options

    @classmethod
    def from_config(cls, config: MongoConfig, *, audit: bool = False) -> "MongoConnection":
        """Build the primary connection, or the dedicated audit one when ``audit``."""
        url = config.connection_url
        database = config.database
        if audit:
            url = config.audit_connection_url or url
            database = config.audit_database or database
        return cls(
            url,
            database,
            serverSelectionTimeoutMS=config.server_selection_timeout_ms,
        )

    @property
    def database_name(self) -> str:
        return self._database_name

    @property
    def client(self) -> AsyncMongoClient[Any]:
        if self._client is None:
            self._client = AsyncMongoClient(self._connection_url, **self._client_options)
            logger.info("mongo_client_created", database=self._database_name)
        return self._client

    async def get_database(self) -> MongoDatabase:
        return MongoDatabase(self.client[self._database_name])

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
