"""Settings loader for SafeBackup.

Defaults ship with the package in ``data/settings.yaml``. A user settings
file (``--config`` or ``$SAFEBACKUP_CONFIG``) may override individual keys:

    log_file: logfile.txt     # audit trail, a plain filename inside the root
    chunk_size: 8192          # bytes per copy / overwrite chunk
    sync: true                # fsync after writing backups, temp files, zeros
    log_failures: false       # also write failed operations to the audit trail
    log_level: warning        # diagnostic logging on stderr

The extension allow-list is deliberately not a setting.
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import InvalidNameError, SettingsError
from .constants import CHUNK_SIZE, DEFAULT_LOG_FILE
from .path_safety import validate_filename

CONFIG_ENV_VAR = "SAFEBACKUP_CONFIG"

LOG_LEVELS = ("debug", "info", "warning", "error")


def get_default_settings_path() -> Path:
    """Get the path to the packaged settings.yaml."""
    # Navigate from utils/ up to the package root, then to data/
    return Path(__file__).parent.parent / "data" / "settings.yaml"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the transfer engine and shell."""

    log_file: str = DEFAULT_LOG_FILE
    chunk_size: int = CHUNK_SIZE
    sync: bool = True
    log_failures: bool = False
    log_level: str = "warning"


_EXPECTED_TYPES = {
    "log_file": str,
    "chunk_size": int,
    "sync": bool,
    "log_failures": bool,
    "log_level": str,
}


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise SettingsError(f"Settings file not found: {path}", path=path, step="settings")
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in settings file {path}: {e}", path=path, step="settings")
    except OSError as e:
        raise SettingsError(f"Cannot read settings file {path}: {e}", path=path, step="settings")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file must contain a mapping: {path}", path=path, step="settings")
    return data


def _validate(values: dict[str, Any], source: Path) -> dict[str, Any]:
    """Check keys and value types, returning normalized values."""
    non_string = [key for key in values if not isinstance(key, str)]
    if non_string:
        raise SettingsError(
            f"Setting names in {source} must be strings, got: {', '.join(map(repr, non_string))}",
            path=source,
            step="settings",
        )

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise SettingsError(
            f"Unknown settings in {source}: {', '.join(unknown)}", path=source, step="settings"
        )

    for key, value in values.items():
        expected = _EXPECTED_TYPES[key]
        # bool is a subclass of int; "chunk_size: true" is still wrong
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise SettingsError(
                f"Setting '{key}' must be {expected.__name__}, got {type(value).__name__}",
                path=source,
                step="settings",
            )

    normalized = dict(values)

    if "chunk_size" in normalized and normalized["chunk_size"] <= 0:
        raise SettingsError("Setting 'chunk_size' must be positive", path=source, step="settings")

    if "log_level" in normalized:
        normalized["log_level"] = normalized["log_level"].lower()
        if normalized["log_level"] not in LOG_LEVELS:
            raise SettingsError(
                f"Setting 'log_level' must be one of: {', '.join(LOG_LEVELS)}",
                path=source,
                step="settings",
            )

    if "log_file" in normalized:
        # The audit trail lives in the root like every other managed file
        try:
            validate_filename(normalized["log_file"])
        except InvalidNameError as e:
            raise SettingsError(f"Setting 'log_file' is not a safe filename: {e}", path=source, step="settings")

    return normalized


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load packaged defaults and overlay an optional user settings file.

    Args:
        config_path: User settings YAML. Falls back to ``$SAFEBACKUP_CONFIG``
            when not given; no user file is read if neither is set.

    Returns:
        The merged ``Settings``

    Raises:
        SettingsError: If a file is missing, malformed, or has bad values
    """
    settings = Settings()

    default_path = get_default_settings_path()
    if default_path.exists():
        settings = replace(settings, **_validate(_read_yaml(default_path), default_path))

    if config_path is None and os.environ.get(CONFIG_ENV_VAR):
        config_path = Path(os.environ[CONFIG_ENV_VAR])

    if config_path is not None:
        config_path = Path(config_path).expanduser()
        settings = replace(settings, **_validate(_read_yaml(config_path), config_path))

    return settings
