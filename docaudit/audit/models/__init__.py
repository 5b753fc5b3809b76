"""Audit domain models.

- HistoryRecord: the immutable persisted record
- BulkOperation: source for set-based operation records
- AuditOptions: attachment-time options
"""

from docaudit.audit.models.operation import OperationKind
from docaudit.audit.models.options import AuditOptions
from docaudit.audit.models.record import BulkOperation, HistoryRecord, utc_now

__all__ = [
    "AuditOptions",
    "BulkOperation",
    "HistoryRecord",
    "OperationKind",
    "utc_now",
]
