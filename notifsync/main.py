"""
Foreground sync runner.

Mounts a NotificationCenter, keeps it running until interrupted or until
the session ends, and forwards store snapshots and notices to callbacks.
"""

import asyncio
import logging
import signal
import sys
from typing import Callable, Optional

from notifsync import __version__
from notifsync.center import NotificationCenter
from notifsync.config import SyncConfig
from notifsync.credential_store import TokenStore
from notifsync.notices import Notice
from notifsync.session import SessionGate
from notifsync.store import NotificationState

# Seconds between checks for a self-stopped scheduler.
SESSION_CHECK_INTERVAL = 1.0

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


# ============================================================================
# Logging Setup
# ============================================================================


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Setup logging for the sync engine.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logger
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("notifsync")


# ============================================================================
# Sync Runner
# ============================================================================


class SyncRunner:
    """
    Runs the notification center in the foreground.

    Exit codes:
        0: stopped by the user
        1: not configured or not logged in
        3: session ended while running
    """

    def __init__(
        self,
        config: SyncConfig,
        token_store: Optional[TokenStore] = None,
        on_state: Optional[Callable[[NotificationState], None]] = None,
        on_notice: Optional[Callable[[Notice], None]] = None,
    ):
        self.config = config
        self.logger = setup_logging(config.log_level)
        self._token_store = token_store or TokenStore()
        self._on_state = on_state
        self._on_notice = on_notice
        self._shutdown_event = asyncio.Event()
        self._center: Optional[NotificationCenter] = None

    @property
    def center(self) -> Optional[NotificationCenter]:
        return self._center

    async def run(self) -> int:
        """
        Run until shutdown is requested or the session ends.

        Returns:
            Exit code
        """
        if not self.config.is_configured:
            self.logger.error("No server URL configured. Run 'notifsync config set server_url URL' first.")
            return 1

        if not SessionGate(self._token_store.get_token).has_valid_credential():
            self.logger.error("Not logged in. Run 'notifsync login' first.")
            return 1

        self.logger.info(f"Starting notifsync v{__version__}")
        self.logger.info(f"Server: {self.config.api_url}")

        self._center = NotificationCenter.from_config(self.config, self._token_store)
        if self._on_state:
            self._center.subscribe(self._on_state)
        if self._on_notice:
            self._center.notices.subscribe(self._on_notice)

        loop = asyncio.get_running_loop()
        for sig in SHUTDOWN_SIGNALS:
            loop.add_signal_handler(sig, self.request_shutdown)

        try:
            if not await self._center.mount():
                self.logger.warning("Session ended during startup, stopping sync")
                return 3
            return await self._wait()
        except asyncio.CancelledError:
            self.logger.info("Sync shutdown requested")
            return 0
        finally:
            for sig in SHUTDOWN_SIGNALS:
                loop.remove_signal_handler(sig)
            await self._center.close()
            self.logger.info("Sync stopped")

    async def _wait(self) -> int:
        while not self._shutdown_event.is_set():
            try:
                await asyncio.wait_for(
                    self._shutdown_event.wait(),
                    timeout=SESSION_CHECK_INTERVAL,
                )
            except asyncio.TimeoutError:
                pass

            if self._center.scheduler.shutdown_requested and not self._shutdown_event.is_set():
                self.logger.warning("Session ended, stopping sync")
                return 3
        return 0

    def request_shutdown(self) -> None:
        """Request graceful shutdown."""
        self._shutdown_event.set()


# ============================================================================
# Main Entry Point
# ============================================================================


def run_sync(
    on_state: Optional[Callable[[NotificationState], None]] = None,
    on_notice: Optional[Callable[[Notice], None]] = None,
) -> int:
    """
    Run the sync engine in the foreground.

    Returns:
        Exit code
    """
    config = SyncConfig()
    runner = SyncRunner(config, on_state=on_state, on_notice=on_notice)
    return asyncio.run(runner.run())


if __name__ == "__main__":
    sys.exit(run_sync())
