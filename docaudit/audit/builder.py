"""Log-entry builder: turns a mutation source into a HistoryRecord.

Two source shapes are supported:

- an entity (full-document mode): the record carries a deep copy of the
  entity's plain representation taken at build time;
- a BulkOperation (selector mode): the record carries the operation's
  selector and update payload, with reserved-prefix keys rewritten so the
  audit store accepts them.

Building is pure: no I/O, and the source is never mutated.
"""

import copy
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from docaudit.audit.models import BulkOperation, HistoryRecord, OperationKind
from docaudit.store.protocols import AuditableEntity

DEFAULT_RESERVED_PREFIX = "$"


def sanitize_keys(value: Any, prefix: str = DEFAULT_RESERVED_PREFIX) -> Any:
    """Strip one leading ``prefix`` character from every mapping key.

    Applies at every nesting level, including mappings inside lists and
    tuples. Returns new containers; the input is left untouched.

    >>> sanitize_keys({"$set": {"value": "foo"}})
    {'set': {'value': 'foo'}}
    """
    if isinstance(value, Mapping):
        return {
            _strip_prefix(key, prefix): sanitize_keys(item, prefix)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [sanitize_keys(item, prefix) for item in value]
    return copy.deepcopy(value)


def _strip_prefix(key: Any, prefix: str) -> Any:
    if isinstance(key, str) and key.startswith(prefix):
        return key[len(prefix):]
    return key


class LogEntryBuilder:
    """Builds HistoryRecords from entities and bulk operations."""

    def __init__(self, reserved_prefix: str = DEFAULT_RESERVED_PREFIX) -> None:
        if len(reserved_prefix) != 1:
            raise ValueError("reserved_prefix must be exactly one character")
        self._reserved_prefix = reserved_prefix

    @property
    def reserved_prefix(self) -> str:
        return self._reserved_prefix

    def build(
        self,
        operation: OperationKind | str,
        location: str,
        timestamp: datetime,
        source: AuditableEntity | BulkOperation,
        *,
        partial: bool = False,
    ) -> HistoryRecord:
        """Build the record for one mutation.

        Args:
            operation: create, update or delete
            location: Logical collection name the mutation happened in
            timestamp: Mutation time
            source: The mutated entity, or a BulkOperation for set-based ops
            partial: Mark the snapshot as known-incomplete

        Returns:
            The immutable HistoryRecord
        """
        fields: dict[str, Any] = {
            "ts": timestamp,
            "operation": OperationKind(operation),
            "location": location,
        }

        if isinstance(source, BulkOperation):
            fields["selector"] = sanitize_keys(source.selector, self._reserved_prefix)
            fields["document"] = sanitize_keys(source.update, self._reserved_prefix)
        else:
            fields["document"] = copy.deepcopy(source.to_plain())

        if source.acting_user:
            fields["user"] = source.acting_user
        if source.action:
            fields["action"] = source.action
        if partial:
            fields["partial"] = True

        return HistoryRecord(**fields)
