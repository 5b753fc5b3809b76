"""Tests for wiring the audit trail from settings."""

from collections.abc import Iterator

import pytest
import structlog

from docaudit.audit import AuditInterceptor
from docaudit.bootstrap import BootstrapContext, bootstrap
from docaudit.config.settings import Settings
from docaudit.store import InMemoryConnection
from docaudit.store.mongodb import MongoConnection
from tests.factories import AuditTest


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


def make_settings(**mongodb: object) -> Settings:
    return Settings(
        audit={"collection_name": "history", "write_timeout": 3.0},
        storage={"mongodb": {"database": "app", **mongodb}},
    )


class TestBootstrap:
    """Tests for bootstrap()."""

    def test_single_connection(self) -> None:
        ctx = bootstrap(make_settings())

        assert isinstance(ctx, BootstrapContext)
        assert isinstance(ctx.connection, MongoConnection)
        assert ctx.connection.database_name == "app"
        assert ctx.audit_connection is None

    def test_app_name_bound_into_logs(self) -> None:
        bootstrap(Settings(app_name="billing"))
        assert structlog.contextvars.get_contextvars()["app"] == "billing"

    def test_dedicated_audit_database(self) -> None:
        ctx = bootstrap(make_settings(audit_database="history_db"))

        assert ctx.audit_connection is not None
        assert ctx.audit_connection.database_name == "history_db"
        assert ctx.connection.database_name == "app"


class TestBootstrapContextAudit:
    """Tests for BootstrapContext.audit()."""

    def test_attaches_configured_interceptor(self) -> None:
        ctx = bootstrap(make_settings())
        model = InMemoryConnection("app").model(AuditTest)

        interceptor = ctx.audit(model)

        assert isinstance(interceptor, AuditInterceptor)
        assert interceptor.collection is model
        assert interceptor.collection_name == "audittests"
        assert interceptor.options.connection is None

    def test_audit_connection_used_by_default(self) -> None:
        ctx = bootstrap(make_settings(audit_database="history_db"))
        interceptor = ctx.audit(InMemoryConnection("app").model(AuditTest))
        assert interceptor.options.connection is ctx.audit_connection

    def test_explicit_connection_wins(self) -> None:
        ctx = bootstrap(make_settings(audit_database="history_db"))
        other = InMemoryConnection("other")
        interceptor = ctx.audit(
            InMemoryConnection("app").model(AuditTest), {"connection": other}
        )
        assert interceptor.options.connection is other

    @pytest.mark.asyncio
    async def test_records_into_configured_collection(self) -> None:
        """Entities on another connection keep their history beside them."""
        ctx = bootstrap(make_settings())
        connection = InMemoryConnection("app")
        model = connection.model(AuditTest)
        ctx.audit(model)

        await model.save(model.new(ts=1))

        records = await connection.database.collection("history").find()
        assert [r["operation"] for r in records] == ["create"]
        assert "audittests" in ctx.registry
