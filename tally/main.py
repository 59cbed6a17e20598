"""Tally - application entry point.

Wires the Shared State Store, the widget side and the application side into
one process and runs the command consumer until interrupted.
"""

from __future__ import annotations

import asyncio
import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from tally.host.channel import WidgetChannelClient
from tally.host.consumer import CommandConsumer
from tally.host.navigation import ApplicationHost, NavigationBridge
from tally.shared.core.configuration import SystemConfig, get_config
from tally.shared.core.event_bus import EventBus, EventPayload
from tally.shared.infrastructure.persistence import CounterRepository, create_state_store
from tally.shared.infrastructure.platform import InMemoryWidgetHost
from tally.widget.provider import CounterWidgetProvider

PROJECT_ROOT = Path(__file__).parent.parent.resolve()
LOGS_DIR = PROJECT_ROOT / "data" / "logs"

logger = logging.getLogger(__name__)


def configure_logging(logs_dir: Path = LOGS_DIR) -> Path:
    """File handler gets everything at LOG_LEVEL, console only warnings and errors."""
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file_path = logs_dir / "tally.log"

    log_level_str = os.getenv("LOG_LEVEL", "DEBUG").upper()
    file_log_level = getattr(logging, log_level_str, logging.DEBUG)

    root_logger = logging.getLogger()
    root_logger.setLevel(file_log_level)
    root_logger.handlers.clear()

    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(file_log_level)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S"
    ))
    root_logger.addHandler(console_handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logger.info(f"Logging configured: file={log_file_path}, console=WARNING+")
    return log_file_path


class TallyApplication:
    """One process hosting both the widget provider and the application."""

    def __init__(self, config: Optional[SystemConfig] = None):
        self.config = config or get_config()
        self.bus = EventBus()
        self.store = create_state_store(self.config.store)
        self.repository = CounterRepository(self.config.store.counters_path)

        self.widget_host = InMemoryWidgetHost()
        self.provider = CounterWidgetProvider(self.store, self.widget_host, self.config.widget)
        self.widget_host.bind(self.provider.on_receive)

        self.app_host = ApplicationHost(self.bus, self.config.channel.name)
        self.navigation = NavigationBridge(self.app_host)
        self.consumer = CommandConsumer(
            self.store,
            self.repository,
            refresh=self.widget_host.request_update,
            event_bus=self.bus,
            config=self.config.consumer,
        )

    async def start(self) -> None:
        self.store.start_flush()
        self.consumer.start()
        logger.info("Tally application started")

    async def stop(self) -> None:
        await self.consumer.stop()
        await self.app_host.finish()
        self.store.close()
        self.repository.close()
        logger.info("Tally application stopped")

    def channel_client(self) -> Optional[WidgetChannelClient]:
        if self.app_host.channel is None:
            return None
        return WidgetChannelClient(self.app_host.channel)


async def run() -> None:
    app = TallyApplication()
    await app.start()

    async def on_new_intent(payload: EventPayload) -> None:
        logger.info(f"Application asked to open product {payload.get('product_id')}")

    await app.app_host.attach_listener(on_new_intent)
    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await app.stop()


def main() -> None:
    load_dotenv(dotenv_path=PROJECT_ROOT / ".env")
    configure_logging()
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
