"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    DEFAULT_STORAGE_FILE,
    AppConfig,
    AppConfigurationError,
    BellSettings,
    ConsoleSettings,
    LoggingSettings,
    StorageSettings,
    TimerSettings,
    UIServerSettings,
)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        timer=_parse_timer_settings(_section(raw, "timer")),
        storage=_parse_storage_settings(_section(raw, "storage"), base_dir=base_dir),
        ui_server=_parse_ui_server_settings(_section(raw, "ui_server")),
        bell=_parse_bell_settings(_section(raw, "bell")),
        console=ConsoleSettings(
            enabled=_as_bool(
                _section(raw, "console").get("enabled", True),
                "console.enabled",
            ),
        ),
        logging=_parse_logging_settings(_section(raw, "logging")),
        source_file=source_file,
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    long_break_every = _as_int(
        section.get("long_break_every", 4),
        "timer.long_break_every",
    )
    if long_break_every <= 0:
        raise AppConfigurationError("timer.long_break_every must be positive.")

    return TimerSettings(
        work_seconds=_minutes_as_seconds(
            section.get("work_minutes", 25),
            "timer.work_minutes",
        ),
        short_break_seconds=_minutes_as_seconds(
            section.get("short_break_minutes", 5),
            "timer.short_break_minutes",
        ),
        long_break_seconds=_minutes_as_seconds(
            section.get("long_break_minutes", 30),
            "timer.long_break_minutes",
        ),
        long_break_every=long_break_every,
        tick_seconds=_as_positive_float(
            section.get("tick_seconds", 1.0),
            "timer.tick_seconds",
        ),
    )


def _parse_storage_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> StorageSettings:
    path = _as_str(section.get("path", DEFAULT_STORAGE_FILE), "storage.path")
    if not path:
        raise AppConfigurationError("storage.path cannot be empty.")
    return StorageSettings(
        enabled=_as_bool(section.get("enabled", True), "storage.enabled"),
        path=_resolve_path(base_dir, path),
    )


def _parse_ui_server_settings(section: Mapping[str, Any]) -> UIServerSettings:
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
        ws_path=_as_str(section.get("ws_path", "/ws"), "ui_server.ws_path"),
    )


def _parse_bell_settings(section: Mapping[str, Any]) -> BellSettings:
    volume = _as_float(section.get("volume", 0.4), "bell.volume")
    if not 0.0 < volume <= 1.0:
        raise AppConfigurationError("bell.volume must be in (0, 1].")

    return BellSettings(
        enabled=_as_bool(section.get("enabled", False), "bell.enabled"),
        output_device=(
            _as_int(section.get("output_device"), "bell.output_device")
            if "output_device" in section
            else None
        ),
        frequency_hz=_as_positive_float(
            section.get("frequency_hz", 880.0),
            "bell.frequency_hz",
        ),
        duration_seconds=_as_positive_float(
            section.get("duration_seconds", 1.2),
            "bell.duration_seconds",
        ),
        volume=volume,
    )


def _parse_logging_settings(section: Mapping[str, Any]) -> LoggingSettings:
    level = _as_str(section.get("level", "INFO"), "logging.level").upper()
    if level not in _LOG_LEVELS:
        allowed = ", ".join(_LOG_LEVELS)
        raise AppConfigurationError(f"logging.level must be one of: {allowed}.")
    return LoggingSettings(level=level)


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _as_positive_float(value: Any, field: str) -> float:
    number = _as_float(value, field)
    if number <= 0:
        raise AppConfigurationError(f"{field} must be positive.")
    return number


def _minutes_as_seconds(value: Any, field: str) -> int:
    seconds = int(round(_as_positive_float(value, field) * 60))
    if seconds <= 0:
        raise AppConfigurationError(f"{field} must be at least one second.")
    return seconds


def _resolve_path(base_dir: Path, raw: str) -> str:
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
