"""
Background refresh scheduler.

Runs two independent repeating tasks against the notification API:
- an unread-count refresh (every 30 seconds by default)
- a full-list refresh of the most recent notifications (every 60 seconds)

Both tasks share one shutdown event. Setting it, or a tick that finds the
session no longer valid, ends both loops.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from notifsync.session import SessionGate

logger = logging.getLogger("notifsync.sync")

DEFAULT_UNREAD_INTERVAL = 30  # seconds
DEFAULT_LIST_INTERVAL = 60  # seconds

RefreshFn = Callable[[], Awaitable[None]]


class SyncScheduler:
    """
    Two periodic refresh loops with a shared cancellation token.

    The session gate is consulted at every tick, never cached. The refresh
    callables are expected to handle their own transport errors.

    Attributes:
        gate: Session gate checked before each tick
        unread_interval: Seconds between unread-count refreshes
        list_interval: Seconds between full-list refreshes
    """

    def __init__(
        self,
        gate: SessionGate,
        refresh_unread: RefreshFn,
        refresh_list: RefreshFn,
        unread_interval: float = DEFAULT_UNREAD_INTERVAL,
        list_interval: float = DEFAULT_LIST_INTERVAL,
    ):
        self._gate = gate
        self._refresh_unread = refresh_unread
        self._refresh_list = refresh_list
        self._unread_interval = unread_interval
        self._list_interval = list_interval
        self._shutdown_event = asyncio.Event()
        self._tasks: list[asyncio.Task] = []
        self._inflight: set[asyncio.Task] = set()

    def start(self) -> bool:
        """
        Start both refresh loops.

        Returns:
            True if the loops were started, False if the session is invalid
            or the scheduler is already running
        """
        if self.is_running:
            return False
        if not self._gate.has_valid_credential():
            logger.debug("No valid session, background sync not started")
            return False

        # Loops that ended on their own (session loss) are discarded.
        self._shutdown_event.clear()
        self._tasks = [
            asyncio.create_task(
                self._run_periodic("unread-count", self._unread_interval, self._refresh_unread)
            ),
            asyncio.create_task(
                self._run_periodic("list", self._list_interval, self._refresh_list)
            ),
        ]
        logger.info(
            f"Background sync started (unread: {self._unread_interval}s, "
            f"list: {self._list_interval}s)"
        )
        return True

    async def _run_periodic(self, name: str, interval: float, refresh: RefreshFn) -> None:
        """Run one refresh loop until shutdown or session loss."""
        try:
            while not self._shutdown_event.is_set():
                if await self._wait_for_next_tick(interval):
                    break

                if not self._gate.has_valid_credential():
                    logger.info(f"Session no longer valid at {name} tick, stopping background sync")
                    self.request_shutdown()
                    break

                logger.debug(f"Running {name} refresh")
                inflight = asyncio.create_task(self._guarded(name, refresh))
                self._inflight.add(inflight)
                inflight.add_done_callback(self._inflight.discard)
                # Stopping the loop must not cancel a request already sent.
                await asyncio.shield(inflight)
        except asyncio.CancelledError:
            logger.debug(f"{name} refresh loop cancelled")
            raise

    @staticmethod
    async def _guarded(name: str, refresh: RefreshFn) -> None:
        try:
            await refresh()
        except Exception as e:
            logger.error(f"Unexpected error in {name} refresh: {e}", exc_info=True)

    async def _wait_for_next_tick(self, interval: float) -> bool:
        """
        Wait for the next tick or shutdown signal.

        Returns:
            True if shutdown was requested while waiting
        """
        try:
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=interval)
            return True
        except asyncio.TimeoutError:
            return False

    def request_shutdown(self) -> None:
        """Signal both loops to stop at their next wake-up."""
        self._shutdown_event.set()

    async def drain(self) -> None:
        """Wait for refreshes already in flight to finish."""
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def stop(self) -> None:
        """
        Stop both loops and wait until they have exited.

        Refreshes already in flight keep running; see ``drain``.
        """
        self.request_shutdown()
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            if not task.done():
                task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        if tasks:
            logger.info("Background sync stopped")

    @property
    def is_running(self) -> bool:
        """True while at least one loop is alive."""
        return any(not task.done() for task in self._tasks)

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_event.is_set()
