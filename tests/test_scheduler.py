import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import StubProbe
from liveness.services.cycle_runner import CycleRunner
from liveness.services.scheduler import HealthScheduler


def _runner(store, *probes):
    return CycleRunner(list(probes) or [StubProbe("redis")], store, probe_timeout=1)


def test_zero_interval_falls_back_to_default(store):
    assert HealthScheduler(_runner(store), interval=0).interval == 10
    assert HealthScheduler(_runner(store), interval=None).interval == 10


def test_negative_interval_rejected(store):
    with pytest.raises(ValueError):
        HealthScheduler(_runner(store), interval=-5)


@pytest.mark.asyncio
async def test_first_cycle_runs_immediately(store):
    scheduler = HealthScheduler(_runner(store), interval=60)
    scheduler.start()
    await asyncio.sleep(0.05)
    try:
        assert set(store.current()) == {"redis"}
    finally:
        await scheduler.stop()


@pytest.mark.asyncio
async def test_cycles_repeat_on_interval(store):
    probe = StubProbe("redis")
    scheduler = HealthScheduler(_runner(store, probe), interval=0.05)
    scheduler.start()
    await asyncio.sleep(0.22)
    await scheduler.stop()
    assert probe.calls >= 3


@pytest.mark.asyncio
async def test_stop_is_prompt_when_idle(store):
    scheduler = HealthScheduler(_runner(store), interval=60)
    scheduler.start()
    await asyncio.sleep(0.05)

    loop = asyncio.get_running_loop()
    start = loop.time()
    await scheduler.stop()
    assert loop.time() - start < 1
    assert scheduler.running is False


@pytest.mark.asyncio
async def test_stop_lets_in_flight_cycle_publish(store):
    probe = StubProbe("redis", delay=0.2)
    scheduler = HealthScheduler(_runner(store, probe), interval=60)
    scheduler.start()
    await asyncio.sleep(0.05)
    assert dict(store.current()) == {}

    await scheduler.stop()
    assert set(store.current()) == {"redis"}
    assert probe.calls == 1


@pytest.mark.asyncio
async def test_no_cycles_after_stop(store):
    probe = StubProbe("redis")
    scheduler = HealthScheduler(_runner(store, probe), interval=0.05)
    scheduler.start()
    await asyncio.sleep(0.08)
    await scheduler.stop()
    calls = probe.calls
    await asyncio.sleep(0.15)
    assert probe.calls == calls


@pytest.mark.asyncio
async def test_stopped_scheduler_cannot_restart(store):
    scheduler = HealthScheduler(_runner(store), interval=60)
    scheduler.start()
    await scheduler.stop()
    with pytest.raises(RuntimeError):
        scheduler.start()


@pytest.mark.asyncio
async def test_start_twice_keeps_single_task(store):
    probe = StubProbe("redis")
    scheduler = HealthScheduler(_runner(store, probe), interval=60)
    scheduler.start()
    scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.stop()
    assert probe.calls == 1


@pytest.mark.asyncio
async def test_stop_before_start_is_terminal(store):
    scheduler = HealthScheduler(_runner(store), interval=60)
    await scheduler.stop()
    assert scheduler.running is False
    with pytest.raises(RuntimeError):
        scheduler.start()


@pytest.mark.asyncio
async def test_loop_survives_runner_errors():
    runner = MagicMock()
    runner.probes = []
    runner.run_cycle = AsyncMock(side_effect=[RuntimeError("boom"), None, None, None, None, None])
    scheduler = HealthScheduler(runner, interval=0.05)
    scheduler.start()
    await asyncio.sleep(0.12)
    await scheduler.stop()
    assert runner.run_cycle.await_count >= 2


@pytest.mark.asyncio
async def test_slow_cycle_drops_missed_ticks(store):
    probe = StubProbe("redis", delay=0.12)
    scheduler = HealthScheduler(_runner(store, probe), interval=0.05)
    scheduler.start()
    await asyncio.sleep(0.3)
    await scheduler.stop()
    # ticks are dropped rather than queued, so cycles never overlap
    assert 1 <= probe.calls <= 3
