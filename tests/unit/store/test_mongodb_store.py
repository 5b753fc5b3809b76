"""Tests for the MongoDB audit destination adapter."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from docaudit.audit.registry import AuditRegistry
from docaudit.config.models import MongoConfig
from docaudit.store.mongodb import MongoAuditCollection, MongoConnection, MongoDatabase


@pytest.fixture
def mongo_collection() -> MagicMock:
    collection = MagicMock()
    collection.name = "auditlog"
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id="oid-1"))
    return collection


@pytest.fixture
def mongo_client(mongo_collection: MagicMock) -> MagicMock:
    database = MagicMock()
    database.name = "test"
    database.__getitem__.return_value = mongo_collection
    client = MagicMock()
    client.__getitem__.return_value = database
    client.close = AsyncMock()
    return client


class TestMongoAuditCollection:
    """Tests for MongoAuditCollection."""

    @pytest.mark.asyncio
    async def test_insert_returns_id(self, mongo_collection: MagicMock) -> None:
        audit = MongoAuditCollection(mongo_collection)
        assert await audit.insert({"operation": "create"}) == "oid-1"
        assert audit.name == "auditlog"

    @pytest.mark.asyncio
    async def test_insert_does_not_mutate_record(self, mongo_collection: MagicMock) -> None:
        """The driver adds _id to the dict it receives; ours stays clean."""

        async def add_id(document: dict) -> MagicMock:
            document["_id"] = "oid-2"
            return MagicMock(inserted_id="oid-2")

        mongo_collection.insert_one.side_effect = add_id
        record = {"operation": "create"}
        await MongoAuditCollection(mongo_collection).insert(record)
        assert "_id" not in record

    @pytest.mark.asyncio
    async def test_insert_error_propagates(self, mongo_collection: MagicMock) -> None:
        mongo_collection.insert_one.side_effect = TimeoutError("server selection")
        with pytest.raises(TimeoutError):
            await MongoAuditCollection(mongo_collection).insert({})


class TestMongoConnection:
    """Tests for MongoConnection."""

    @pytest.mark.asyncio
    async def test_get_database_uses_injected_client(self, mongo_client: MagicMock) -> None:
        connection = MongoConnection("mongodb://db", "test", client=mongo_client)
        database = await connection.get_database()

        assert isinstance(database, MongoDatabase)
        mongo_client.__getitem__.assert_called_with("test")
        assert database.collection("auditlog").name == "auditlog"

    @pytest.mark.asyncio
    async def test_registry_resolves_through_connection(
        self, mongo_client: MagicMock, mongo_collection: MagicMock
    ) -> None:
        connection = MongoConnection("mongodb://db", "test", client=mongo_client)
        registry = AuditRegistry(default_connection=connection)

        handle = await registry.resolve("invoices")
        await handle.insert({"operation": "delete"})

        mongo_collection.insert_one.assert_awaited_once_with({"operation": "delete"})

    @pytest.mark.asyncio
    async def test_close(self, mongo_client: MagicMock) -> None:
        connection = MongoConnection("mongodb://db", "test", client=mongo_client)
        await connection.close()
        mongo_client.close.assert_awaited_once()

    def test_from_config_primary(self) -> None:
        config = MongoConfig(connection_url="mongodb://primary", database="app")
        connection = MongoConnection.from_config(config)
        assert connection.database_name == "app"

    def test_from_config_audit(self) -> None:
        config = MongoConfig(
            connection_url="mongodb://primary",
            database="app",
            audit_connection_url="mongodb://audit",
            audit_database="history",
        )
        connection = MongoConnection.from_config(config, audit=True)
        assert connection.database_name == "history"

    def test_from_config_audit_defaults_to_primary_database(self) -> None:
        config = MongoConfig(database="app", audit_connection_url="mongodb://audit")
        assert MongoConnection.from_config(config, audit=True).database_name == "app"
