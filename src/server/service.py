from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import threading
from typing import Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from contracts.ui_protocol import (
    COMMAND_ADD_TASK,
    COMMAND_LIST_TASKS,
    COMMAND_REMOVE_TASK,
    COMMAND_TOGGLE_TASK,
    EVENT_ERROR,
    EVENT_HELLO,
    EVENT_TASKS,
    REASON_INVALID_COMMAND,
)
from runtime.commands import CommandParseError, CommandPublisher, parse_ws_message

from .config import HEALTHZ_PATH, STATE_PATH, UIServerConfig
from .events import StickyEventStore, make_event

_SUPPORTED_COMMANDS = (
    COMMAND_ADD_TASK,
    COMMAND_REMOVE_TASK,
    COMMAND_TOGGLE_TASK,
    COMMAND_LIST_TASKS,
)


class UIServer:
    """Threaded asyncio server: websocket commands in, task/countdown events out."""

    def __init__(
        self,
        config: UIServerConfig,
        command_publisher: Optional[CommandPublisher] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._command_publisher = command_publisher
        self._logger = logger or logging.getLogger("ui_server")
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_async: Optional[asyncio.Event] = None
        self._started = threading.Event()
        self._startup_error: Optional[Exception] = None
        self._connected_clients: set[ServerConnection] = set()
        self._sticky_events = StickyEventStore()

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def websocket_path(self) -> str:
        return self._config.websocket_path

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._startup_error is None
        )

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("UI server is already running")
            return

        self._startup_error = None
        self._started.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="ui-server",
        )
        self._thread.start()

        if not self._started.wait(timeout_seconds):
            raise RuntimeError(
                f"UI server did not start within {timeout_seconds:.1f}s"
            )

        if self._startup_error is not None:
            raise RuntimeError(f"UI server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return

        if self._loop and self._stop_async:
            self._loop.call_soon_threadsafe(self._stop_async.set)

        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error(
                "UI server thread did not stop within %.1fs",
                timeout_seconds,
            )

        self._thread = None
        self._loop = None
        self._stop_async = None

    def publish(self, event_type: str, **payload) -> None:
        """Queue an event for every connected client; safe to call from any thread."""
        message = make_event(event_type, **payload)
        self._sticky_events.remember(event_type, message)

        if not self.is_running or self._loop is None:
            return

        try:
            future = asyncio.run_coroutine_threadsafe(
                self._broadcast(message),
                self._loop,
            )
            future.add_done_callback(self._consume_future_exception)
        except RuntimeError:
            # Loop may be shutting down.
            return

    def forget(self, event_type: str) -> None:
        """Drop the cached event of this type so new clients no longer receive it."""
        self._sticky_events.forget(event_type)

    def state_body(self) -> bytes:
        """Body served at ``GET /state``: the latest tasks event."""
        latest = self._sticky_events.latest(EVENT_TASKS)
        if latest is None:
            latest = make_event(EVENT_TASKS, title="", active_task_id=None, tasks=[])
        return latest.encode("utf-8")

    def dispatch_message(self, message: str | bytes) -> Optional[str]:
        """Parse one inbound websocket message and queue it for the runtime.

        Returns an error event for the sending client when the message is
        rejected, otherwise ``None``.
        """
        try:
            command = parse_ws_message(message)
        except CommandParseError as error:
            self._logger.warning("Rejected websocket command: %s", error)
            return make_event(
                EVENT_ERROR,
                reason=REASON_INVALID_COMMAND,
                message=str(error),
            )

        if self._command_publisher is None:
            return make_event(
                EVENT_ERROR,
                reason=REASON_INVALID_COMMAND,
                message="This server does not accept commands.",
            )

        self._logger.debug("Queued websocket command: %s", command)
        self._command_publisher.publish(command)
        return None

    @staticmethod
    def _consume_future_exception(future) -> None:
        with contextlib.suppress(Exception):
            future.result()

    def _run_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._stop_async = asyncio.Event()

        try:
            self._loop.run_until_complete(self._serve())
        except Exception as error:
            self._startup_error = error
            self._logger.error("UI server failed: %s", error, exc_info=True)
            self._started.set()
        finally:
            if self._loop is not None:
                pending = asyncio.all_tasks(self._loop)
                for task in pending:
                    task.cancel()
                with contextlib.suppress(Exception):
                    self._loop.run_until_complete(
                        asyncio.gather(*pending, return_exceptions=True)
                    )
                self._loop.close()

    async def _serve(self) -> None:
        async with websockets.serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        ):
            self._logger.info(
                "UI server running at http://%s:%d (websocket: %s)",
                self._config.host,
                self._config.port,
                self._config.websocket_path,
            )
            self._started.set()
            await self._stop_async.wait()
            await self._close_clients()

    async def _handler(self, websocket: ServerConnection) -> None:
        request_path = (
            urlsplit(websocket.request.path).path
            if websocket.request is not None
            else ""
        )
        if request_path != self._config.websocket_path:
            await websocket.close(code=1008, reason="Invalid websocket path")
            return

        self._connected_clients.add(websocket)
        self._logger.info("Client connected: %s", websocket.remote_address)
        try:
            await websocket.send(
                make_event(
                    EVENT_HELLO,
                    message="UI websocket connected",
                    commands=list(_SUPPORTED_COMMANDS),
                )
            )
            for cached in self._sticky_events.snapshot():
                await websocket.send(cached)

            async for message in websocket:
                self._logger.debug("Received from UI: %s", message)
                reply = self.dispatch_message(message)
                if reply is not None:
                    await websocket.send(reply)
        except websockets.exceptions.ConnectionClosed:
            self._logger.info("Client disconnected: %s", websocket.remote_address)
        finally:
            self._connected_clients.discard(websocket)

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response | None:
        del connection  # Unused in HTTP routing.
        path = urlsplit(request.path).path

        if path == self._config.websocket_path:
            return None

        if path == HEALTHZ_PATH:
            return self._response(
                200,
                "OK",
                b"ok\n",
                "text/plain; charset=utf-8",
            )

        if path == STATE_PATH:
            return self._response(
                200,
                "OK",
                self.state_body(),
                "application/json",
            )

        return self._response(
            404,
            "Not Found",
            json.dumps({"error": "not found", "path": path}).encode("utf-8"),
            "application/json",
        )

    def _response(
        self,
        status_code: int,
        reason_phrase: str,
        body: bytes,
        content_type: str,
    ) -> Response:
        headers = Headers()
        headers["Content-Type"] = content_type
        headers["Content-Length"] = str(len(body))
        headers["Cache-Control"] = "no-store"
        return Response(status_code, reason_phrase, headers, body)

    async def _close_clients(self) -> None:
        if not self._connected_clients:
            return

        tasks = [
            client.close(code=1001, reason="Server shutting down")
            for client in tuple(self._connected_clients)
        ]
        await asyncio.gather(*tasks, return_exceptions=True)
        self._connected_clients.clear()

    async def _broadcast(self, message: str) -> None:
        if not self._connected_clients:
            return

        clients = tuple(self._connected_clients)
        disconnected = []
        tasks = [client.send(message) for client in clients]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for client, result in zip(clients, results):
            if isinstance(result, Exception):
                disconnected.append(client)
                self._logger.warning("Failed to send message to client: %s", result)

        for client in disconnected:
            self._connected_clients.discard(client)
