import pytest

from liveness.schemas.health import HealthStatus, ProbeResult
from liveness.services.reporting import aggregate_status, build_report

PASS, WARN, FAIL = HealthStatus.PASS, HealthStatus.WARN, HealthStatus.FAIL


def _snapshot(*statuses):
    return {f"dep{i}": ProbeResult(status=s) for i, s in enumerate(statuses)}


@pytest.mark.parametrize("statuses, expected", [
    ((), PASS),
    ((PASS,), PASS),
    ((FAIL,), FAIL),
    ((PASS, PASS, PASS), PASS),
    ((FAIL, FAIL, FAIL), FAIL),
    ((PASS, FAIL), WARN),
    ((PASS, FAIL, FAIL), WARN),
    # warn entries count as not failed
    ((WARN,), PASS),
    ((WARN, WARN), PASS),
    ((WARN, FAIL), WARN),
])
def test_aggregate_status(statuses, expected):
    assert aggregate_status(_snapshot(*statuses)) == expected


def test_build_report_with_empty_snapshot():
    report = build_report({}, "v5.0.0", "Tyk GW")
    assert report.status == PASS
    assert report.details is None
    assert "details" not in report.to_wire()


def test_build_report_carries_version_and_details():
    snapshot = {"redis": ProbeResult(status=FAIL, output="refused")}
    report = build_report(snapshot, "v5.0.0", "Tyk GW")
    wire = report.to_wire()
    assert wire["status"] == "fail"
    assert wire["version"] == "v5.0.0"
    assert wire["description"] == "Tyk GW"
    assert wire["details"]["redis"]["output"] == "refused"
