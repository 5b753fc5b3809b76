"""Shared test fixtures for the docaudit test suite."""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from docaudit.audit import AuditInterceptor, AuditRegistry
from docaudit.store import InMemoryConnection, InMemoryModel
from tests.factories import AuditTest, StepClock


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "[audit]\\nwrite_timeout = 2.0",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear cached settings and loaded TOML values around each test."""
    from docaudit.config import get_settings
    from docaudit.config.settings import set_toml_config

    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def connection() -> InMemoryConnection:
    return InMemoryConnection("test")


@pytest.fixture
def second_connection() -> InMemoryConnection:
    return InMemoryConnection("audit-test")


@pytest.fixture
def registry(connection: InMemoryConnection) -> AuditRegistry:
    return AuditRegistry(default_connection=connection)


@pytest.fixture
def model(connection: InMemoryConnection) -> InMemoryModel[AuditTest]:
    return connection.model(AuditTest)


@pytest.fixture
def interceptor(
    registry: AuditRegistry,
    model: InMemoryModel[AuditTest],
    clock: StepClock,
) -> AuditInterceptor:
    """Interceptor attached to the AuditTest model."""
    return AuditInterceptor(registry, clock=clock).attach(model)
