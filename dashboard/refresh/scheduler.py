"""
Repeating refresh timer. One cycle at a time: a tick that fires while the previous cycle is still in
flight is skipped, never queued.
"""
import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from dashboard.utils.backoff import backoff_delay

logger = logging.getLogger(__name__)

RefreshAction = Callable[[], Awaitable[Optional[bool]]]


class RefreshScheduler:
    """Drives action() every interval seconds on the running event loop.
    action returns False (or raises) for a failed cycle; consecutive failures stretch the delay up to max_backoff.
    Why available: Owns the polling cadence and retry policy so the adapter and reconciliation stay single-shot."""

    def __init__(
        self,
        action: RefreshAction,
        interval: float,
        *,
        max_backoff: Optional[float] = None,
        name: str = "refresh",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.action = action
        self.interval = interval
        self.max_backoff = max_backoff
        self.name = name
        self.failures = 0
        self.last_tick_at: Optional[float] = None
        self._clock = clock
        self._sleep = sleep
        self._busy = False
        self._task: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def armed(self) -> bool:
        return self._task is not None and not self._task.done()

    def next_delay(self) -> float:
        return backoff_delay(self.interval, self.failures, self.max_backoff)

    def due(self) -> bool:
        """True when no cycle has run yet or the current delay has elapsed since the last one started."""
        if self.last_tick_at is None:
            return True
        return self._clock() - self.last_tick_at >= self.next_delay()

    async def tick(self) -> bool:
        """Run one cycle now. Returns False without running when a cycle is already in flight."""
        if self._busy:
            logger.debug("refresh_skipped_busy", extra={"scheduler": self.name})
            return False
        self._busy = True
        self.last_tick_at = self._clock()
        try:
            ok = await self.action()
        except asyncio.CancelledError:
            raise
        except Exception:
            # the timer must outlive a broken cycle; the feed shows its own error state
            logger.exception("refresh_cycle_crashed", extra={"scheduler": self.name})
            ok = False
        finally:
            self._busy = False

        if ok is False:
            self.failures += 1
            logger.info(
                "refresh_backoff",
                extra={"scheduler": self.name, "failures": self.failures, "next_delay_s": self.next_delay()},
            )
        else:
            self.failures = 0
        return True

    async def tick_if_due(self) -> bool:
        """Tick only when due. For hosts that re-enter on their own timer (Streamlit fragments) instead of start()."""
        if not self.due():
            return False
        return await self.tick()

    async def _run(self) -> None:
        while True:
            await self.tick()
            await self._sleep(self.next_delay())

    def start(self) -> None:
        """Arm the timer on the running loop. The first cycle runs immediately. Calling start() twice is a no-op."""
        if self.armed:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(), name=f"refresh:{self.name}")
        logger.debug("refresh_armed", extra={"scheduler": self.name, "interval_s": self.interval})

    async def stop(self) -> None:
        """Disarm the timer and wait for its task to finish. An in-flight cycle is cancelled."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("refresh_disarmed", extra={"scheduler": self.name})

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
