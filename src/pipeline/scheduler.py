"""Scheduler: one cooperative loop driving both periodic jobs.

Both jobs run inline in the same loop, so a fetch never overlaps a token
rotation. A tick that comes due while a job is still running is kept as a
single pending tick; further missed ticks are dropped. A job that overruns
its interval cannot starve the other one.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[object]]


class Scheduler:
    """Runs ``refresh_job`` every short interval and ``fetch_job`` every long one.

    Usage::

        scheduler = Scheduler(refresher.refresh_all, fetch_cycle, 60, 600)
        loop.add_signal_handler(signal.SIGINT, scheduler.stop)
        await scheduler.start()   # returns after stop()
    """

    def __init__(
        self,
        refresh_job: Job,
        fetch_job: Job,
        refresh_interval: float,
        fetch_interval: float,
    ) -> None:
        self._refresh_job = refresh_job
        self._fetch_job = fetch_job
        self._refresh_interval = refresh_interval
        self._fetch_interval = fetch_interval
        self._stop = asyncio.Event()

    async def start(self) -> None:
        """Block until ``stop()`` is called."""
        loop = asyncio.get_running_loop()
        started = loop.time()
        next_refresh = started + self._refresh_interval
        next_fetch = started + self._fetch_interval
        logger.debug("Tickers started")

        while not self._stop.is_set():
            timeout = max(0.0, min(next_refresh, next_fetch) - loop.time())
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=timeout)
            except asyncio.TimeoutError:
                pass
            if self._stop.is_set():
                break

            # One job per iteration; when both are due the older deadline wins,
            # refresh on a tie.
            now = loop.time()
            refresh_due = now >= next_refresh
            fetch_due = now >= next_fetch
            if refresh_due and (not fetch_due or next_refresh <= next_fetch):
                await self._run("token refresh", self._refresh_job)
                next_refresh = _next_tick(next_refresh, self._refresh_interval, loop.time())
            elif fetch_due:
                await self._run("vacancy fetch", self._fetch_job)
                next_fetch = _next_tick(next_fetch, self._fetch_interval, loop.time())

        logger.debug("Tickers stopped")

    def stop(self) -> None:
        """Signal the loop to exit. Observed between ticks only."""
        self._stop.set()

    async def _run(self, name: str, job: Job) -> None:
        try:
            await job()
        except Exception:
            logger.exception("Scheduled %s failed", name)


def _next_tick(deadline: float, interval: float, now: float) -> float:
    """Next deadline on the original phase; at most one overdue tick is kept."""
    missed = int((now - deadline) // interval)
    return deadline + max(1, missed) * interval
