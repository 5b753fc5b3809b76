"""Exception hierarchy for the audit trail.

All errors raised by docaudit itself inherit from DocAuditError. Failures
coming from the underlying store (network errors, duplicate keys, ...)
are never wrapped and reach the caller unchanged.
"""


class DocAuditError(Exception):
    """Base exception for all audit trail errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ResolutionError(DocAuditError):
    """Raised when no connection is available to build an audit handle."""

    def __init__(self, message: str, collection_name: str | None = None) -> None:
        super().__init__(message)
        self.collection_name = collection_name


class MissingMetadataError(DocAuditError):
    """Raised when the location of a history record cannot be determined."""


class AuditWriteTimeoutError(DocAuditError):
    """Raised when a history insert exceeds the configured write timeout."""

    def __init__(self, message: str, timeout: float) -> None:
        super().__init__(message)
        self.timeout = timeout


class ConfigurationError(DocAuditError):
    """Raised when attachment options are invalid."""
