"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_CONFIG_FILE = "config.toml"
CONFIG_FILE_ENV_VAR = "TASKSPILL_CONFIG_FILE"
DEFAULT_STORAGE_FILE = "taskspill.json"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class TimerSettings:
    """Interval lengths and cadence from `[timer]`, stored in whole seconds."""
    work_seconds: int = 25 * 60
    short_break_seconds: int = 5 * 60
    long_break_seconds: int = 30 * 60
    long_break_every: int = 4
    tick_seconds: float = 1.0


@dataclass(frozen=True)
class StorageSettings:
    """Snapshot persistence settings from `[storage]`."""
    enabled: bool = True
    path: str = DEFAULT_STORAGE_FILE


@dataclass(frozen=True)
class UIServerSettings:
    """Built-in UI server settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    ws_path: str = "/ws"


@dataclass(frozen=True)
class BellSettings:
    """Audible interval-complete chime from `[bell]`."""
    enabled: bool = False
    output_device: Optional[int] = None
    frequency_hz: float = 880.0
    duration_seconds: float = 1.2
    volume: float = 0.4


@dataclass(frozen=True)
class ConsoleSettings:
    enabled: bool = True


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    timer: TimerSettings = field(default_factory=TimerSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    ui_server: UIServerSettings = field(default_factory=UIServerSettings)
    bell: BellSettings = field(default_factory=BellSettings)
    console: ConsoleSettings = field(default_factory=ConsoleSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    source_file: str = ""
