"""Test factories for audited documents."""

from datetime import UTC, datetime, timedelta

from docaudit.store import Document


class AuditTest(Document):
    """Document type used throughout the audit tests."""

    ts: int
    value: str | None = None


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now
