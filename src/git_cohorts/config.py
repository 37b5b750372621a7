"""Configuration loading and management for git-cohorts.

Configuration sources are merged in priority order:
    1. Defaults (defined in CohortConfig)
    2. Global config (~/.git-cohorts.toml)
    3. Project config (./git-cohorts.toml)
    4. Explicit config file
    5. Environment variables (GIT_COHORTS_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(cohort_type="domain", top_n=10)
    >>> config.cohort_type
    <CohortType.DOMAIN: 'domain'>
    >>> config.top_n
    10
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

from .exceptions import ConfigurationError, InvalidConfigError
from .models import SECONDS_PER_DAY, CohortType, IntervalType, UnitType

_ENV_PREFIX = "GIT_COHORTS_"

_ENUM_FIELDS = {
    "cohort_type": CohortType,
    "unit": UnitType,
    "interval": IntervalType,
}


@dataclass(frozen=True)
class CohortConfig:
    """Parameters of one histogram request.

    Attributes:
        cohort_type: tenure, domain, repo or suffix
        unit: authors, events or size
        interval: month or year
        brief_threshold_days: authors whose last-minus-first commit span is
            at or below this many days are reported as "Brief"
        top_n: number of categories kept by name in categorical histograms
    """

    cohort_type: CohortType = CohortType.TENURE
    unit: UnitType = UnitType.AUTHORS
    interval: IntervalType = IntervalType.YEAR
    brief_threshold_days: int = 90
    top_n: int = 15

    def __post_init__(self) -> None:
        """Coerce enum strings and validate ranges."""
        for name, enum_type in _ENUM_FIELDS.items():
            value = getattr(self, name)
            if isinstance(value, enum_type):
                continue
            try:
                # frozen dataclass: bypass __setattr__ for coercion
                object.__setattr__(self, name, enum_type(str(value).lower()))
            except ValueError:
                choices = ", ".join(e.value for e in enum_type)
                raise InvalidConfigError(name, value, f"expected one of: {choices}")

        if self.brief_threshold_days < 0:
            raise InvalidConfigError(
                "brief_threshold_days", self.brief_threshold_days, "must be non-negative"
            )
        if self.top_n < 1:
            raise InvalidConfigError("top_n", self.top_n, "must be at least 1")

    @property
    def monthly(self) -> bool:
        return self.interval is IntervalType.MONTH

    @property
    def brief_threshold_seconds(self) -> int:
        return self.brief_threshold_days * SECONDS_PER_DAY


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> CohortConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); ``None``
            values are ignored so unset options keep lower-priority values.

    Returns:
        Validated CohortConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".git-cohorts.toml"
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = Path.cwd() / "git-cohorts.toml"
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(CohortConfig)}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise InvalidConfigError(unknown[0], merged[unknown[0]], "unknown configuration key")

    return CohortConfig(**merged)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from GIT_COHORTS_* environment variables.

    Supported environment variables:
        GIT_COHORTS_COHORT_TYPE: tenure/domain/repo/suffix
        GIT_COHORTS_UNIT: authors/events/size
        GIT_COHORTS_INTERVAL: month/year
        GIT_COHORTS_BRIEF_THRESHOLD_DAYS: int
        GIT_COHORTS_TOP_N: int
    """
    result: dict[str, Any] = {}

    for f in fields(CohortConfig):
        env_key = f"{_ENV_PREFIX}{f.name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        if f.name in _ENUM_FIELDS:
            result[f.name] = env_value
            continue

        try:
            result[f.name] = int(env_value)
        except ValueError:
            raise InvalidConfigError(env_key, env_value, "expected an integer")

    return result


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load TOML file and return the ``[cohorts]`` table (or the whole file)."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")

    section = data.get("cohorts", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"Invalid config file '{path}': [cohorts] must be a table")
    return dict(section)
