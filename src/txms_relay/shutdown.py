"""Graceful shutdown handler for the TxMS relay server.

Usage:
    ```python
    async def main():
        async with GracefulShutdown() as shutdown:
            server = RelayServer.from_settings(settings)
            shutdown.register_cleanup(server.stop)
            await server.start()

            await shutdown.wait()
    ```
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from collections.abc import Callable
from contextlib import suppress
from types import FrameType
from typing import Any

logger = logging.getLogger(__name__)

# Signals to trap for graceful shutdown
SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)


class GracefulShutdown:
    """Traps SIGTERM/SIGINT and runs cleanup callbacks on exit.

    A second signal while shutdown is already in progress exits immediately.
    """

    def __init__(self) -> None:
        self._shutdown_event: asyncio.Event | None = None
        self._shutdown_requested = False
        self._original_handlers: dict[signal.Signals, Any] = {}
        self._cleanup_callbacks: list[Callable[[], Any]] = []
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def is_shutdown_requested(self) -> bool:
        """Check if shutdown has been requested."""
        return self._shutdown_requested

    def register_cleanup(self, callback: Callable[[], Any]) -> None:
        """Register a cleanup callback (sync or async) to run during shutdown."""
        self._cleanup_callbacks.append(callback)

    def request_shutdown(self) -> None:
        """Request shutdown from application code."""
        if not self._shutdown_requested:
            self._shutdown_requested = True
            logger.info("Shutdown requested programmatically")
            if self._shutdown_event:
                self._shutdown_event.set()

    async def wait(self) -> None:
        """Block until a shutdown signal arrives or request_shutdown() is called."""
        if self._shutdown_event is None:
            self._shutdown_event = asyncio.Event()
        if self._shutdown_requested:
            self._shutdown_event.set()
        await self._shutdown_event.wait()

    def install_signal_handlers(self) -> None:
        """Install signal handlers on the running loop.

        On Windows only SIGINT is delivered, through signal.signal.
        """
        self._loop = asyncio.get_running_loop()
        if self._shutdown_event is None:
            self._shutdown_event = asyncio.Event()

        for sig in SHUTDOWN_SIGNALS:
            try:
                if sys.platform == "win32":
                    self._original_handlers[sig] = signal.signal(sig, self._handle_signal_sync)
                else:
                    self._loop.add_signal_handler(sig, self._handle_signal, sig)
            except (ValueError, OSError) as e:
                logger.warning("Could not install handler for %s: %s", sig.name, e)

        logger.debug("Signal handlers installed")

    def remove_signal_handlers(self) -> None:
        """Remove installed signal handlers and restore originals."""
        for sig, original in self._original_handlers.items():
            with suppress(ValueError, OSError):
                signal.signal(sig, original)
        self._original_handlers.clear()

        if self._loop is not None and sys.platform != "win32":
            for sig in SHUTDOWN_SIGNALS:
                with suppress(ValueError, OSError):
                    self._loop.remove_signal_handler(sig)

        logger.debug("Signal handlers removed")

    def _handle_signal(self, sig: signal.Signals) -> None:
        if self._shutdown_requested:
            logger.warning("Received %s again - forcing exit!", sig.name)
            sys.exit(128 + sig.value)

        self._shutdown_requested = True
        logger.info("Received %s - initiating graceful shutdown...", sig.name)
        if self._shutdown_event:
            self._shutdown_event.set()

    def _handle_signal_sync(self, sig: int, _frame: FrameType | None) -> None:
        self._handle_signal(signal.Signals(sig))

    async def run_cleanup_callbacks(self) -> None:
        """Run all registered cleanup callbacks in registration order."""
        for callback in self._cleanup_callbacks:
            try:
                result = callback()
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error("Cleanup callback failed: %s", e)

    async def __aenter__(self) -> GracefulShutdown:
        """Async context manager entry - install signal handlers."""
        self.install_signal_handlers()
        return self

    async def __aexit__(self, *_args: Any) -> None:
        """Async context manager exit - cleanup."""
        self.remove_signal_handlers()
        await self.run_cleanup_callbacks()
