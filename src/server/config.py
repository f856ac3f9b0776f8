"""Configuration model for the websocket/HTTP UI server."""

from __future__ import annotations

from dataclasses import dataclass


class ServerConfigurationError(Exception):
    """Raised when UI server configuration is invalid."""


HEALTHZ_PATH = "/healthz"
STATE_PATH = "/state"
DEFAULT_WEBSOCKET_PATH = "/ws"


@dataclass(frozen=True)
class UIServerConfig:
    """Validated UI server configuration derived from app settings."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    ws_path: str = DEFAULT_WEBSOCKET_PATH

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServerConfigurationError("ui_server.host cannot be empty")

        if not 1 <= self.port <= 65535:
            raise ServerConfigurationError(
                f"ui_server.port must be in [1, 65535], got: {self.port}"
            )

        if not self.ws_path.startswith("/"):
            raise ServerConfigurationError(
                f"ui_server.ws_path must start with '/', got: {self.ws_path!r}"
            )

        if self.ws_path in (HEALTHZ_PATH, STATE_PATH):
            raise ServerConfigurationError(
                f"ui_server.ws_path collides with a reserved route: {self.ws_path}"
            )

    @property
    def websocket_path(self) -> str:
        return self.ws_path

    @classmethod
    def from_settings(cls, settings) -> "UIServerConfig":
        ws_path = settings.ws_path.strip() if settings.ws_path else ""
        return cls(
            enabled=bool(settings.enabled),
            host=settings.host,
            port=settings.port,
            ws_path=ws_path or DEFAULT_WEBSOCKET_PATH,
        )
