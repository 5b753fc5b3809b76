"""Test factories for creating test data."""

from tests.factories.documents import AuditTest, StepClock

__all__ = [
    "AuditTest",
    "StepClock",
]
