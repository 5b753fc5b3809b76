"""docaudit: audit trail interceptor for document stores."""

__version__ = "0.1.0"
