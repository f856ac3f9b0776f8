import sys
import types
import unittest
from pathlib import Path

from app_config_schema import UIServerSettings

# Import server.config without executing src/server/__init__.py.
_SERVER_DIR = Path(__file__).resolve().parents[2] / "src" / "server"
if "server" not in sys.modules:
    _pkg = types.ModuleType("server")
    _pkg.__path__ = [str(_SERVER_DIR)]  # type: ignore[attr-defined]
    sys.modules["server"] = _pkg

from server.config import ServerConfigurationError, UIServerConfig


class UIServerConfigTests(unittest.TestCase):
    def test_from_settings_copies_values(self) -> None:
        settings = UIServerSettings(
            enabled=False,
            host="0.0.0.0",
            port=9000,
            ws_path="/events",
        )

        config = UIServerConfig.from_settings(settings)

        self.assertFalse(config.enabled)
        self.assertEqual("0.0.0.0", config.host)
        self.assertEqual(9000, config.port)
        self.assertEqual("/events", config.websocket_path)

    def test_blank_ws_path_falls_back_to_default(self) -> None:
        config = UIServerConfig.from_settings(UIServerSettings(ws_path="  "))
        self.assertEqual("/ws", config.websocket_path)

    def test_rejects_invalid_values(self) -> None:
        for kwargs in (
            {"host": " "},
            {"port": 0},
            {"port": 70000},
            {"ws_path": "ws"},
            {"ws_path": "/healthz"},
            {"ws_path": "/state"},
        ):
            with self.subTest(kwargs):
                with self.assertRaises(ServerConfigurationError):
                    UIServerConfig(**kwargs)


if __name__ == "__main__":
    unittest.main()
