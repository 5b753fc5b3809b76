"""Immutable history of document mutations.

The audit layer stamps lifecycle metadata on documents and appends one
history record per create, update or delete to the ``auditlog``
collection of the owning connection.
"""

from docaudit.audit.builder import LogEntryBuilder, sanitize_keys
from docaudit.audit.interceptor import AuditInterceptor
from docaudit.audit.models import (
    AuditOptions,
    BulkOperation,
    HistoryRecord,
    OperationKind,
)
from docaudit.audit.registry import AuditRegistry, AuditRegistryEntry

__all__ = [
    "AuditInterceptor",
    "AuditOptions",
    "AuditRegistry",
    "AuditRegistryEntry",
    "BulkOperation",
    "HistoryRecord",
    "LogEntryBuilder",
    "OperationKind",
    "sanitize_keys",
]
