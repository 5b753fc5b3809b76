"""Configuration model exports.

    from docaudit.config.models import AuditConfig, MongoConfig
"""

from docaudit.config.models.audit import AuditConfig
from docaudit.config.models.observability import LoggingConfig, ObservabilityConfig
from docaudit.config.models.storage import MongoConfig, StorageConfig

__all__ = [
    "AuditConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "MongoConfig",
    "StorageConfig",
]
