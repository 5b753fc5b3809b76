"""TOML configuration loader.

Configuration files live in a ``config/`` directory holding a required
``default.toml`` and an optional ``{DOCAUDIT_ENV}.toml`` overlay.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "DOCAUDIT_CONFIG_DIR"
ENVIRONMENT_ENV = "DOCAUDIT_ENV"
DEFAULT_ENVIRONMENT = "development"

# How many parent directories are searched for a config/ directory
_SEARCH_DEPTH = 5


def get_config_dir() -> Path:
    """Locate the configuration directory.

    ``DOCAUDIT_CONFIG_DIR`` wins when set and must point to an existing
    directory. Otherwise the working directory and its parents are searched
    for a ``config/`` folder.

    Raises:
        FileNotFoundError: If DOCAUDIT_CONFIG_DIR names a missing directory
    """
    explicit = os.environ.get(CONFIG_DIR_ENV)
    if explicit:
        path = Path(explicit)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {explicit}")
        return path

    candidates = [Path.cwd(), *Path.cwd().parents][:_SEARCH_DEPTH]
    for directory in candidates:
        if (directory / "config").is_dir():
            return directory / "config"

    return Path("config")


def get_environment() -> str:
    """Return the active environment name (``development`` if unset)."""
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse a TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")
    return tomllib.loads(file_path.read_text(encoding="utf-8"))


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``.

    Tables present on both sides are merged recursively; any other value
    from ``override`` replaces the one in ``base``. Neither input is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Load ``default.toml`` overlaid with the environment file, if any."""
    config_dir = get_config_dir()

    default_path = config_dir / "default.toml"
    if not default_path.is_file():
        raise FileNotFoundError(
            f"Default configuration file not found: {default_path}. "
            f"Create config/default.toml or set {CONFIG_DIR_ENV}."
        )
    config = load_toml(default_path)

    overlay_path = config_dir / f"{get_environment()}.toml"
    if overlay_path.is_file():
        config = deep_merge(config, load_toml(overlay_path))

    return config
