"""Operation kinds recorded in the audit trail."""

from enum import Enum


class OperationKind(str, Enum):
    """Kind of mutation a history record describes."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
