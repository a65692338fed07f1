"""Shared fixtures for sysdash tests."""

import pytest

from sysdash.models import (
    CpuReading,
    DiskUsage,
    NetworkCounters,
    ProcessSnapshot,
    SystemSnapshot,
    TemperatureReading,
)


def build_snapshot(
    timestamp: float = 100.0,
    rx: int = 0,
    tx: int = 0,
    processes: tuple[ProcessSnapshot, ...] = (),
    **overrides,
) -> SystemSnapshot:
    """Build a SystemSnapshot with plausible defaults."""
    fields = dict(
        timestamp=timestamp,
        cpu_per_core=(CpuReading("CPU0", 10.0), CpuReading("CPU1", 30.0)),
        cpu_average=CpuReading("AVG", 20.0),
        memory_used=4 * 1024**3,
        memory_total=16 * 1024**3,
        swap_used=0,
        swap_total=2 * 1024**3,
        network={"eth0": NetworkCounters(rx, tx)},
        network_total=NetworkCounters(rx, tx),
        disks=(DiskUsage("/dev/sda1", "/", 50 * 1024**3, 100 * 1024**3, 50.0),),
        temperatures=(TemperatureReading("Package id 0", 45.0),),
        processes=processes,
    )
    fields.update(overrides)
    return SystemSnapshot(**fields)


def build_process(pid: int, name: str = "proc", cpu: float = 0.0, mem: float = 0.0) -> ProcessSnapshot:
    return ProcessSnapshot(pid=pid, name=name, cpu_percent=cpu, memory_percent=mem, parent_pid=1)


@pytest.fixture
def make_snapshot():
    """Factory fixture for SystemSnapshot objects."""
    return build_snapshot


@pytest.fixture
def make_process():
    """Factory fixture for ProcessSnapshot objects."""
    return build_process


class FakeCollector:
    """Collector returning scripted snapshots; exceptions in the script are raised."""

    def __init__(self, script=None) -> None:
        self.script = list(script or [])
        self.calls = 0

    def collect(self) -> SystemSnapshot:
        self.calls += 1
        if self.script:
            item = self.script.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return build_snapshot(timestamp=float(self.calls))


@pytest.fixture
def fake_collector():
    return FakeCollector
