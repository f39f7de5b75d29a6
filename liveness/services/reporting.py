from liveness.schemas.health import HealthReport, HealthStatus, Snapshot


def aggregate_status(snapshot: Snapshot) -> HealthStatus:
    """Fold per-dependency results into one status.

    `fail` only when every dependency failed, `warn` when some did, `pass`
    otherwise (including an empty snapshot). Individual `warn` results count
    as not failed.
    """
    fail_count = sum(1 for result in snapshot.values() if result.status == HealthStatus.FAIL)

    if fail_count == 0:
        return HealthStatus.PASS
    if fail_count == len(snapshot):
        return HealthStatus.FAIL
    return HealthStatus.WARN


def build_report(snapshot: Snapshot, version: str, description: str) -> HealthReport:
    return HealthReport(
        status=aggregate_status(snapshot),
        version=version,
        description=description,
        details=dict(snapshot) or None,
    )
