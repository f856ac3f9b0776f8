import logging
import signal
import sys
from queue import Queue
from typing import Any, Callable, Optional

from alerts import CompositeNotifier, LoggingNotifier, NotificationSink, UINotifier
from app_config import AppConfig, AppConfigurationError, load_app_config, resolve_config_path
from persistence import JsonFileStore, MemoryStore, PersistenceStore
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from runtime.clock import SystemClock
from runtime.commands import QueueCommandPublisher
from runtime.console import ConsoleCommandSource
from runtime.controller import ControllerDependencies, TimerController
from runtime.scheduler import TickScheduler
from server import ServerConfigurationError, UIServer, UIServerConfig
from tasktimer import TaskTimerEngine, TimerPolicy


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("taskspill")


def setup_signal_handlers(request_stop: Callable[[], None]) -> None:
    """Route SIGTERM and SIGINT to a graceful runtime stop."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        logging.getLogger("taskspill").info(
            "%s received, stopping...",
            signal.Signals(signum).name,
        )
        request_stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def build_store(app_config: AppConfig, logger: logging.Logger) -> PersistenceStore:
    if not app_config.storage.enabled:
        logger.warning("Storage disabled; tasks will not survive a restart.")
        return MemoryStore()
    logger.info("Task snapshot file: %s", app_config.storage.path)
    return JsonFileStore(
        app_config.storage.path,
        logger=logging.getLogger("persistence"),
    )


def build_notifier(
    app_config: AppConfig,
    ui_server: Optional[UIServer],
    logger: logging.Logger,
) -> CompositeNotifier:
    alerts_logger = logging.getLogger("alerts")
    sinks: list[NotificationSink] = [LoggingNotifier(logger=alerts_logger)]

    if ui_server is not None:
        sinks.append(UINotifier(ui_server))

    if app_config.bell.enabled:
        try:
            # sounddevice needs PortAudio at import time.
            from alerts.bell import BellNotifier

            sinks.append(
                BellNotifier(
                    frequency_hz=app_config.bell.frequency_hz,
                    duration_seconds=app_config.bell.duration_seconds,
                    volume=app_config.bell.volume,
                    output_device_index=app_config.bell.output_device,
                    logger=alerts_logger,
                )
            )
            logger.info("Bell enabled")
        except Exception as error:
            logger.error(f"Bell initialization error: {error}")
            logger.warning("Continuing without bell.")

    return CompositeNotifier(sinks, logger=alerts_logger)


def start_ui_server(
    app_config: AppConfig,
    command_queue: "Queue[Any]",
    logger: logging.Logger,
) -> Optional[UIServer]:
    try:
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error(f"UI server configuration error: {error}")
        logger.warning("Continuing without UI server.")
        return None

    if not ui_server_config.enabled:
        return None

    ui_server = UIServer(
        config=ui_server_config,
        command_publisher=QueueCommandPublisher(command_queue),
        logger=logging.getLogger("ui_server"),
    )
    try:
        logger.info("Starting UI server...")
        ui_server.start(timeout_seconds=5.0)
    except RuntimeError as error:
        logger.error(f"UI server startup failed: {error}")
        logger.warning("Continuing without UI server.")
        return None

    logger.info(
        "UI server ready at http://%s:%d (websocket: %s)",
        ui_server.host,
        ui_server.port,
        ui_server.websocket_path,
    )
    return ui_server


def main(argv: Optional[list[str]] = None) -> int:
    """Run the task timer until interrupted."""
    args = sys.argv[1:] if argv is None else argv
    explicit_path = args[0] if args else None

    try:
        config_path = resolve_config_path(explicit_path)
        app_config = load_app_config(str(config_path))
    except AppConfigurationError as error:
        setup_logging().error(f"App configuration error: {error}")
        return 1

    logger = setup_logging(app_config.logging.level)
    if app_config.source_file:
        logger.info("Loaded runtime config: %s", app_config.source_file)
    else:
        logger.info("No config file at %s; using defaults.", config_path)

    timer = app_config.timer
    policy = TimerPolicy(
        work_seconds=timer.work_seconds,
        short_break_seconds=timer.short_break_seconds,
        long_break_seconds=timer.long_break_seconds,
        long_break_every=timer.long_break_every,
    )
    engine = TaskTimerEngine(policy, logger=logging.getLogger("tasktimer"))

    command_queue: Queue[Any] = Queue()
    ui_server = start_ui_server(app_config, command_queue, logger)

    runtime_logger = logging.getLogger("runtime")
    scheduler = TickScheduler(logger=runtime_logger)
    controller = TimerController(
        ControllerDependencies(
            engine=engine,
            store=build_store(app_config, logger),
            clock=SystemClock(),
            scheduler=scheduler,
            notifier=build_notifier(app_config, ui_server, logger),
            logger=runtime_logger,
            tick_seconds=timer.tick_seconds,
        )
    )

    console: Optional[ConsoleCommandSource] = None
    if app_config.console.enabled:
        console = ConsoleCommandSource(
            QueueCommandPublisher(command_queue),
            logger=logging.getLogger("runtime.console"),
        )

    runtime = RuntimeEngine(
        RuntimeBootstrap(
            logger=runtime_logger,
            controller=controller,
            scheduler=scheduler,
            command_queue=command_queue,
            ui_server=ui_server,
            console=console,
            hooks=RuntimeHooks(setup_signal_handlers=setup_signal_handlers),
        )
    )
    return runtime.run()


if __name__ == "__main__":
    sys.exit(main())
