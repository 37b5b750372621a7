"""Configuration exceptions: settings, metadata files, paths."""

from pathlib import Path
from typing import Any

from .base import GitCohortsError


class ConfigurationError(GitCohortsError):
    """Base class for configuration-related errors."""

    pass


class InvalidPathError(ConfigurationError):
    """Raised when a provided path is invalid."""

    def __init__(self, path: Path, reason: str):
        super().__init__("Invalid path", details={"path": str(path), "reason": reason})
        self.path = path


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
