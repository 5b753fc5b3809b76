"""Mutation interceptor: the hook layer attached to each audited entity type.

The interceptor is attached to a host collection and receives its
lifecycle hooks:

- ``before_persist``: stamps ``created_at``/``updated_at`` and records a
  create or update, unless the save changes nothing;
- ``before_remove``: always records a delete.

Mutations the hooks cannot observe (find-and-modify variants, set-based
updates and deletes) are recorded through the ``log_*`` entry points.

Errors are never swallowed. Hook errors propagate to the host so it can
abort the operation. Manual entry points raise as well, unless the caller
passes a ``callback`` continuation: it then receives the error (or None on
success) exactly once and nothing is raised.
"""

import asyncio
import functools
import inspect
import time
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime
from typing import Any

from docaudit.audit.builder import LogEntryBuilder
from docaudit.audit.models import (
    AuditOptions,
    BulkOperation,
    HistoryRecord,
    OperationKind,
    utc_now,
)
from docaudit.audit.registry import AuditRegistry
from docaudit.errors import (
    AuditWriteTimeoutError,
    MissingMetadataError,
    ResolutionError,
)
from docaudit.observability.logging import get_logger
from docaudit.observability.metrics import (
    HISTORY_RECORDS_WRITTEN,
    HISTORY_WRITE_FAILURES,
    HISTORY_WRITE_LATENCY,
    UNMODIFIED_SAVES_SKIPPED,
)
from docaudit.store.protocols import (
    AuditableEntity,
    AuditCollection,
    Connection,
    HostCollection,
)

logger = get_logger(__name__)

Continuation = Callable[[BaseException | None], Any]
Source = AuditableEntity | BulkOperation


class AuditInterceptor:
    """Audit hooks and manual logging entry points for one entity type.

    Args:
        registry: Shared registry resolving audit collections
        collection_name: Static location used when neither the source nor
            the attached collection names one
        options: Attachment options (an AuditOptions or a plain mapping)
        builder: Record builder, defaults to a LogEntryBuilder using "$"
        clock: Timestamp source for hooks and timestamp-defaulting calls
        write_timeout: Seconds to wait for an audit insert; None waits
            for as long as the store does
    """

    def __init__(
        self,
        registry: AuditRegistry,
        *,
        collection_name: str | None = None,
        options: AuditOptions | Mapping[str, Any] | None = None,
        builder: LogEntryBuilder | None = None,
        clock: Callable[[], datetime] = utc_now,
        write_timeout: float | None = None,
    ) -> None:
        if isinstance(options, AuditOptions):
            self._options = options
        else:
            self._options = AuditOptions.from_mapping(options)
        if write_timeout is not None and write_timeout <= 0:
            raise ValueError("write_timeout must be positive")

        self._registry = registry
        self._collection_name = collection_name
        self._builder = builder or LogEntryBuilder()
        self._clock = clock
        self._write_timeout = write_timeout
        self._collection: HostCollection | None = None

    @property
    def options(self) -> AuditOptions:
        return self._options

    @property
    def collection(self) -> HostCollection | None:
        """Host collection this interceptor is attached to."""
        return self._collection

    @property
    def collection_name(self) -> str | None:
        """Static location: the configured name, else the attached collection's."""
        if self._collection_name:
            return self._collection_name
        if self._collection is not None:
            return self._collection.name
        return None

    def attach(self, collection: HostCollection) -> "AuditInterceptor":
        """Register the lifecycle hooks on a host collection."""
        self._collection = collection
        collection.before_persist(self.before_persist)
        collection.before_remove(self.before_remove)
        logger.debug("interceptor_attached", collection=collection.name)
        return self

    async def get_audit_collection(
        self, collection_name: str | None = None
    ) -> AuditCollection:
        """Resolve the audit collection holding this entity type's history."""
        name = collection_name or self.collection_name
        if not name:
            raise MissingMetadataError(
                "Cannot resolve an audit collection without a collection name"
            )
        return await self._registry.resolve(name, self._options_for(self._attached_connection()))

    # Lifecycle

    def stamp(self, entity: AuditableEntity, now: datetime) -> None:
        """Set lifecycle timestamps: both when new, only updated_at otherwise."""
        if entity.is_new:
            entity.created_at = now
        entity.updated_at = now

    async def before_persist(self, entity: AuditableEntity) -> None:
        """Pre-persist hook: record a create or update for a real change."""
        if not entity.is_new and not entity.is_modified():
            location = self._locate(entity) or "unknown"
            UNMODIFIED_SAVES_SKIPPED.labels(location=location).inc()
            logger.debug("unmodified_save_skipped", location=location, entity_id=str(entity.id))
            return

        operation = OperationKind.CREATE if entity.is_new else OperationKind.UPDATE
        self._require_location(entity, operation)
        now = self._clock()
        self.stamp(entity, now)
        await self._record(entity, operation, now)

    async def before_remove(self, entity: AuditableEntity) -> None:
        """Pre-destroy hook: every removal is recorded."""
        await self._record(entity, OperationKind.DELETE, self._clock())

    # Manual entry points

    async def log_change(
        self,
        entity: AuditableEntity,
        operation: OperationKind | str,
        timestamp: datetime | None = None,
        callback: Continuation | None = None,
    ) -> HistoryRecord | None:
        """Record a mutation made through a path the hooks cannot see."""
        return await self._complete(
            self._log_entity(entity, operation, timestamp, partial=False),
            callback,
        )

    async def log_partial_change(
        self,
        entity: AuditableEntity,
        operation: OperationKind | str,
        timestamp: datetime | None = None,
        callback: Continuation | None = None,
    ) -> HistoryRecord | None:
        """Like log_change, for entities whose state is known to be incomplete.

        The record is flagged ``partial: True``.
        """
        return await self._complete(
            self._log_entity(entity, operation, timestamp, partial=True),
            callback,
        )

    async def log_create(
        self, entity: AuditableEntity, callback: Continuation | None = None
    ) -> HistoryRecord | None:
        return await self.log_change(entity, OperationKind.CREATE, None, callback)

    async def log_update(
        self, entity: AuditableEntity, callback: Continuation | None = None
    ) -> HistoryRecord | None:
        return await self.log_change(entity, OperationKind.UPDATE, None, callback)

    async def log_delete(
        self, entity: AuditableEntity, callback: Continuation | None = None
    ) -> HistoryRecord | None:
        return await self.log_change(entity, OperationKind.DELETE, None, callback)

    async def log_bulk_update(
        self,
        selector: Mapping[str, Any],
        update: Mapping[str, Any],
        callback: Continuation | None = None,
        *,
        acting_user: str | None = None,
        action: str | None = None,
    ) -> HistoryRecord | None:
        """Record a set-based update such as ``update_many(selector, update)``."""
        operation = BulkOperation(
            selector=dict(selector),
            update=dict(update),
            acting_user=acting_user,
            action=action,
            collection=self._collection,
        )
        return await self._complete(
            self._log_bulk(operation, OperationKind.UPDATE), callback
        )

    async def log_bulk_delete(
        self,
        selector: Mapping[str, Any],
        callback: Continuation | None = None,
        *,
        acting_user: str | None = None,
        action: str | None = None,
    ) -> HistoryRecord | None:
        """Record a set-based delete such as ``delete_many(selector)``."""
        operation = BulkOperation(
            selector=dict(selector),
            acting_user=acting_user,
            action=action,
            collection=self._collection,
        )
        return await self._complete(
            self._log_bulk(operation, OperationKind.DELETE), callback
        )

    # Internals

    async def _log_entity(
        self,
        entity: AuditableEntity,
        operation: OperationKind | str,
        timestamp: datetime | None,
        *,
        partial: bool,
    ) -> HistoryRecord:
        kind = OperationKind(operation)
        self._require_location(entity, kind)
        now = timestamp or self._clock()
        self.stamp(entity, now)
        return await self._record(entity, kind, now, partial=partial)

    async def _log_bulk(
        self, operation: BulkOperation, kind: OperationKind
    ) -> HistoryRecord | None:
        # Bulk records are secondary to the mutation they describe: missing
        # metadata is reported but does not fail the caller.
        if self._locate(operation) is None:
            logger.error(
                "audit_location_missing",
                operation=kind.value,
                selector=operation.selector,
            )
            return None
        try:
            return await self._record(operation, kind, self._clock())
        except ResolutionError as exc:
            logger.error(
                "audit_location_missing",
                operation=kind.value,
                location=exc.collection_name,
                error=exc.message,
            )
            return None

    async def _record(
        self,
        source: Source,
        operation: OperationKind,
        timestamp: datetime,
        *,
        partial: bool = False,
    ) -> HistoryRecord:
        location = self._require_location(source, operation)
        record = self._builder.build(operation, location, timestamp, source, partial=partial)
        audit = await self._registry.resolve(
            location, self._options_for(self._source_connection(source))
        )
        await self._insert(audit, record, mode=self._mode(source, partial))
        return record

    def _require_location(self, source: Source, operation: OperationKind) -> str:
        location = self._locate(source)
        if location is None:
            logger.error("audit_location_missing", operation=operation.value)
            raise MissingMetadataError(
                f"Cannot determine the collection for a '{operation.value}' history record"
            )
        return location

    async def _insert(self, audit: AuditCollection, record: HistoryRecord, *, mode: str) -> None:
        started = time.perf_counter()
        try:
            if self._write_timeout is None:
                await audit.insert(record.to_document())
            else:
                insert = asyncio.ensure_future(audit.insert(record.to_document()))
                try:
                    await asyncio.wait_for(asyncio.shield(insert), self._write_timeout)
                except TimeoutError:
                    # The issued insert keeps running; a late failure is still reported
                    if not insert.done():
                        insert.add_done_callback(
                            functools.partial(self._late_insert_done, record)
                        )
                    raise
        except TimeoutError as exc:
            timeout_error = AuditWriteTimeoutError(
                f"History insert for '{record.location}' exceeded {self._write_timeout}s",
                timeout=self._write_timeout,
            )
            self._write_failed(record, timeout_error, timeout=self._write_timeout)
            raise timeout_error from exc
        except Exception as exc:
            self._write_failed(record, exc)
            raise

        HISTORY_WRITE_LATENCY.labels(location=record.location).observe(
            time.perf_counter() - started
        )
        HISTORY_RECORDS_WRITTEN.labels(
            location=record.location, operation=record.operation, mode=mode
        ).inc()
        logger.debug(
            "history_recorded",
            location=record.location,
            operation=record.operation,
            audit_collection=audit.name,
            partial=bool(record.partial),
        )

    def _late_insert_done(self, record: HistoryRecord, insert: asyncio.Future[Any]) -> None:
        if insert.cancelled():
            return
        exc = insert.exception()
        if exc is not None:
            self._write_failed(record, exc, late=True)

    def _write_failed(
        self, record: HistoryRecord, exc: BaseException, **context: Any
    ) -> None:
        HISTORY_WRITE_FAILURES.labels(
            location=record.location,
            operation=record.operation,
            error_type=type(exc).__name__,
        ).inc()
        logger.error(
            "audit_write_failed",
            location=record.location,
            operation=record.operation,
            error=str(exc),
            error_type=type(exc).__name__,
            **context,
        )

    async def _complete(
        self, work: Awaitable[HistoryRecord | None], callback: Continuation | None
    ) -> HistoryRecord | None:
        if callback is None:
            return await work
        try:
            record = await work
        except Exception as exc:
            await self._invoke(callback, exc)
            return None
        await self._invoke(callback, None)
        return record

    @staticmethod
    async def _invoke(callback: Continuation, error: BaseException | None) -> None:
        outcome = callback(error)
        if inspect.isawaitable(outcome):
            await outcome

    def _locate(self, source: Source) -> str | None:
        """Destination name: the bulk operation's collection or the entity's, else the static name."""
        if isinstance(source, BulkOperation):
            if source.collection is not None and source.collection.name:
                return source.collection.name
        elif source.collection_name:
            return source.collection_name
        return self.collection_name

    def _source_connection(self, source: Source) -> Connection | None:
        if isinstance(source, BulkOperation):
            if source.collection is not None:
                return source.collection.connection
        elif source.connection is not None:
            return source.connection
        return self._attached_connection()

    def _attached_connection(self) -> Connection | None:
        return self._collection.connection if self._collection is not None else None

    def _options_for(self, source_connection: Connection | None) -> AuditOptions:
        if self._options.connection is not None or source_connection is None:
            return self._options
        return AuditOptions(connection=source_connection)

    @staticmethod
    def _mode(source: Source, partial: bool) -> str:
        if isinstance(source, BulkOperation):
            return "selector"
        return "partial" if partial else "document"
