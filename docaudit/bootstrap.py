"""Bootstrap module for wiring the audit trail from configuration.

Creates the MongoDB connections and the shared AuditRegistry described by
the settings, and configures logging.

Example usage:

    from docaudit.bootstrap import bootstrap

    ctx = bootstrap()
    invoices = ctx.audit(invoice_collection)

    await invoices.log_bulk_update({"status": "open"}, {"$set": {"status": "void"}})
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from docaudit.audit.builder import LogEntryBuilder
from docaudit.audit.interceptor import AuditInterceptor
from docaudit.audit.models import AuditOptions
from docaudit.audit.registry import AuditRegistry
from docaudit.config import get_settings
from docaudit.config.settings import Settings
from docaudit.observability.logging import get_logger, setup_logging
from docaudit.store.mongodb import MongoConnection
from docaudit.store.protocols import HostCollection

logger = get_logger(__name__)


@dataclass
class BootstrapContext:
    """Everything needed to attach interceptors to entity types."""

    settings: Settings
    registry: AuditRegistry
    connection: MongoConnection
    audit_connection: MongoConnection | None = None

    def audit(
        self,
        collection: HostCollection,
        options: AuditOptions | Mapping[str, Any] | None = None,
    ) -> AuditInterceptor:
        """Create an interceptor with the configured policy and attach it.

        When a dedicated audit connection is configured it is used unless
        ``options`` names another connection.
        """
        if not isinstance(options, AuditOptions):
            options = AuditOptions.from_mapping(options)
        if options.connection is None and self.audit_connection is not None:
            options = AuditOptions(connection=self.audit_connection)

        interceptor = AuditInterceptor(
            self.registry,
            options=options,
            builder=LogEntryBuilder(self.settings.audit.reserved_key_prefix),
            write_timeout=self.settings.audit.write_timeout,
        )
        return interceptor.attach(collection)

    async def close(self) -> None:
        await self.connection.close()
        if self.audit_connection is not None:
            await self.audit_connection.close()


def bootstrap(settings: Settings | None = None) -> BootstrapContext:
    """Build connections and the audit registry from settings.

    Args:
        settings: Settings to use (default: get_settings())

    Returns:
        BootstrapContext holding the registry and connections
    """
    settings = settings or get_settings()
    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        elide_payloads=log_config.elide_payloads,
    )
    structlog.contextvars.bind_contextvars(app=settings.app_name)

    mongo = settings.storage.mongodb
    connection = MongoConnection.from_config(mongo)
    audit_connection = None
    if mongo.audit_connection_url or mongo.audit_database:
        audit_connection = MongoConnection.from_config(mongo, audit=True)

    registry = AuditRegistry(
        default_connection=audit_connection or connection,
        audit_collection_name=settings.audit.collection_name,
    )
    logger.info(
        "audit_bootstrapped",
        database=connection.database_name,
        audit_database=(audit_connection or connection).database_name,
        audit_collection=settings.audit.collection_name,
    )
    return BootstrapContext(
        settings=settings,
        registry=registry,
        connection=connection,
        audit_connection=audit_connection,
    )
