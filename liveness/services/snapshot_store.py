import threading
from collections.abc import Mapping
from types import MappingProxyType

from liveness.schemas.health import ProbeResult, Snapshot

_EMPTY: Snapshot = MappingProxyType({})


class SnapshotStore:
    """Holds the most recently published snapshot.

    Published snapshots are copied and wrapped read-only, so a reader can never
    see a half-built map or alias a dict the publisher keeps mutating. The lock
    only guards the reference swap, never probe work.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot: Snapshot = _EMPTY

    def publish(self, snapshot: Mapping[str, ProbeResult]) -> Snapshot:
        frozen = MappingProxyType(dict(snapshot))
        with self._lock:
            self._snapshot = frozen
        return frozen

    def current(self) -> Snapshot:
        with self._lock:
            return self._snapshot
