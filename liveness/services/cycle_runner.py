import asyncio
import time
from collections.abc import Iterable

from liveness.core.logging_config import setup_logging
from liveness.middlewares.metrics_middleware import CYCLE_DURATION, CYCLES_SKIPPED, DEPENDENCY_UP
from liveness.schemas.health import HealthStatus, Snapshot
from liveness.services.probes import Probe
from liveness.services.snapshot_store import SnapshotStore

logger = setup_logging()


class CycleRunner:
    """Runs every enabled probe once, concurrently, and publishes the results.

    Nothing is published until all probes have finished, so a snapshot always
    holds exactly one result per enabled probe. A cycle requested while
    another is still in flight is skipped rather than queued.
    """

    def __init__(self, probes: Iterable[Probe], store: SnapshotStore, probe_timeout: float | None = None):
        self.probes = list(probes)
        self.store = store
        self.probe_timeout = probe_timeout
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def run_cycle(self) -> Snapshot | None:
        if self._in_flight:
            CYCLES_SKIPPED.inc()
            logger.warning("Previous liveness cycle still running, skipping")
            return None

        self._in_flight = True
        start_time = time.perf_counter()
        try:
            results = await asyncio.gather(*(probe.run(self.probe_timeout) for probe in self.probes))
            snapshot = self.store.publish({probe.name: result for probe, result in zip(self.probes, results)})
        finally:
            self._in_flight = False

        duration = time.perf_counter() - start_time
        CYCLE_DURATION.observe(duration)
        for name, result in snapshot.items():
            DEPENDENCY_UP.labels(dependency=name).set(1 if result.status == HealthStatus.PASS else 0)

        logger.debug(
            "Liveness cycle published",
            results={name: result.status.value for name, result in snapshot.items()},
            duration=f"{duration:.4f}s",
        )
        return snapshot
