import asyncio

from liveness.core.config import DEFAULT_CHECK_INTERVAL
from liveness.core.logging_config import setup_logging
from liveness.services.cycle_runner import CycleRunner

logger = setup_logging()


class HealthScheduler:
    """Drives the cycle runner on a fixed interval from a background task.

    One cycle runs as soon as the scheduler starts, then one per tick. Ticks
    that elapse while a slow cycle is still running are dropped. `stop` lets
    an in-flight cycle finish and publish, then ends the loop; a stopped
    scheduler cannot be started again.
    """

    def __init__(self, runner: CycleRunner, interval: float = DEFAULT_CHECK_INTERVAL):
        if interval is not None and interval < 0:
            raise ValueError(f"interval must not be negative, got {interval}")
        self.runner = runner
        self.interval = interval or DEFAULT_CHECK_INTERVAL
        self._task: asyncio.Task | None = None
        self._stop_event: asyncio.Event | None = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._stopped

    def start(self):
        if self._stopped:
            raise RuntimeError("Liveness scheduler is stopped and cannot be restarted")
        if self._task is not None:
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="liveness-scheduler")
        logger.info("Liveness scheduler started", interval=self.interval, probes=[p.name for p in self.runner.probes])

    async def stop(self):
        if self._stopped:
            return
        self._stopped = True
        if self._task is None:
            return

        self._stop_event.set()
        await self._task
        logger.info("Liveness scheduler stopped")

    async def _run(self):
        loop = asyncio.get_running_loop()
        next_tick = loop.time()

        while not self._stop_event.is_set():
            try:
                await self.runner.run_cycle()
            except Exception:
                logger.exception("Liveness cycle error")

            now = loop.time()
            next_tick += self.interval
            if next_tick <= now:
                missed = int((now - next_tick) // self.interval) + 1
                next_tick += missed * self.interval
                logger.warning("Liveness cycle overran its interval", dropped_ticks=missed)

            try:
                await asyncio.wait_for(self._stop_event.wait(), next_tick - now)
            except asyncio.TimeoutError:
                pass

        logger.debug("Stopping health checks for all components")
