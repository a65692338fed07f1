"""Configuration loading for sysdash.

Settings come from an optional TOML file, overridden by command-line flags.
Search order: explicit --config path → ~/.config/sysdash/config.toml → defaults only.
"""

from __future__ import annotations

import threading
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from sysdash.models import TemperatureUnit

MIN_REFRESH_MS = 250
# Largest wait the platform's blocking calls accept
MAX_REFRESH_MS = int(threading.TIMEOUT_MAX) * 1000

_DEFAULT_PATH = Path.home() / ".config" / "sysdash" / "config.toml"
_DEFAULT_LOG_PATH = Path.home() / ".local" / "state" / "sysdash" / "sysdash.log"


class ConfigError(ValueError):
    """The configuration cannot be used; reported before anything starts."""


@dataclass(frozen=True)
class Config:
    """Immutable startup configuration."""

    refresh_ms: int = 1000
    temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS
    show_average_cpu: bool = False
    tick_ms: int = 200
    warmup_ms: int = 250
    stale_after_ms: int = 60_000
    window_size: int = 60
    log_path: Path = _DEFAULT_LOG_PATH

    @property
    def refresh_seconds(self) -> float:
        return self.refresh_ms / 1000

    def validate(self) -> Config:
        """Return self if usable.

        Raises:
            ConfigError: Describing the first invalid setting.
        """
        if self.refresh_ms < MIN_REFRESH_MS:
            raise ConfigError(
                f"Please set your update rate to be at least {MIN_REFRESH_MS} milliseconds."
            )
        if self.refresh_ms > MAX_REFRESH_MS:
            raise ConfigError(
                f"Please set your update rate to be at most {MAX_REFRESH_MS} milliseconds."
            )
        for name in ("tick_ms", "warmup_ms", "stale_after_ms", "window_size"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.warmup_ms >= self.refresh_ms:
            raise ConfigError(
                f"warmup_ms ({self.warmup_ms}) must be shorter than refresh_ms ({self.refresh_ms})"
            )
        return self

    def with_overrides(self, **overrides: Any) -> Config:
        """Apply the overrides that are not None (unset CLI flags)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"unknown config keys: {', '.join(sorted(unknown))}")

        values = dict(data)
        if "temperature_unit" in values:
            values["temperature_unit"] = parse_temperature_unit(values["temperature_unit"])
        if "log_path" in values:
            values["log_path"] = Path(values["log_path"]).expanduser()
        for name in ("refresh_ms", "tick_ms", "warmup_ms", "stale_after_ms", "window_size"):
            if name in values and (
                not isinstance(values[name], int) or isinstance(values[name], bool)
            ):
                raise ConfigError(f"{name} must be an integer, got {values[name]!r}")
        return cls(**values)

    @classmethod
    def load(cls, path: Path | None = None) -> Config:
        """Load configuration, merging the user's TOML over defaults.

        Args:
            path: Explicit config file path (from --config). If None, tries the
                  default location ~/.config/sysdash/config.toml.

        Raises:
            ConfigError: If an explicit path doesn't exist, or a file can't be parsed.
        """
        if path is None:
            if not _DEFAULT_PATH.is_file():
                return cls()
            path = _DEFAULT_PATH
        elif not path.is_file():
            raise ConfigError(f"config file not found: {path}")

        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"invalid TOML in {path}: {e}") from e
        return cls.from_dict(data)


def parse_temperature_unit(value: str) -> TemperatureUnit:
    try:
        return TemperatureUnit(str(value).lower())
    except ValueError:
        choices = ", ".join(u.value for u in TemperatureUnit)
        raise ConfigError(f"unknown temperature unit {value!r} (choose from {choices})") from None
