"""Unit tests for configuration models."""

import pytest
from pydantic import ValidationError

from docaudit.config.models import (
    AuditConfig,
    LoggingConfig,
    MongoConfig,
    StorageConfig,
)


class TestAuditConfig:
    def test_defaults(self) -> None:
        config = AuditConfig()
        assert config.collection_name == "auditlog"
        assert config.reserved_key_prefix == "$"
        assert config.write_timeout is None

    def test_empty_collection_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AuditConfig(collection_name="")

    def test_empty_prefix_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AuditConfig(reserved_key_prefix="")


class TestMongoConfig:
    def test_defaults(self) -> None:
        config = MongoConfig()
        assert config.connection_url == "mongodb://localhost:27017"
        assert config.server_selection_timeout_ms == 30000

    def test_timeout_positive(self) -> None:
        with pytest.raises(ValidationError):
            MongoConfig(server_selection_timeout_ms=0)

    def test_storage_nests_mongodb(self) -> None:
        assert StorageConfig().mongodb.database == "test"


class TestLoggingConfig:
    def test_rejects_unknown_format(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")
