import asyncio

import pytest

from liveness.schemas.health import ComponentKind
from liveness.services.probes import Probe
from liveness.services.snapshot_store import SnapshotStore


class StubProbe(Probe):
    """Probe whose outcome is set by the test."""

    def __init__(self, name, component_kind=ComponentKind.SYSTEM, error=None, delay=0.0):
        self.name = name
        self.component_kind = component_kind
        self.error = error
        self.delay = delay
        self.calls = 0

    async def check(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error


@pytest.fixture
def store():
    return SnapshotStore()
