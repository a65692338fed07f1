"""Host metrics collection using psutil."""

import time
from dataclasses import dataclass
from typing import Any

import psutil
import structlog

from sysdash.models import (
    CpuReading,
    DiskUsage,
    NetworkCounters,
    ProcessSnapshot,
    SystemSnapshot,
    TemperatureReading,
    TemperatureUnit,
)

log = structlog.get_logger()


class CollectionError(Exception):
    """A sample could not be taken at all."""


@dataclass(slots=True, frozen=True)
class CollectorConfig:
    temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS
    show_average_cpu: bool = False


class StalenessTracker:
    """
    Cache of previous readings that forgets anything older than ``max_age``.

    Used to diff cumulative counters into rates. A cached value past the
    threshold is reported as absent so a stale delta is never passed off as
    current throughput.
    """

    def __init__(self, max_age: float) -> None:
        """
        Initialize the tracker.

        Args:
            max_age: Age in seconds after which a cached value is discarded.
        """
        self.max_age = max_age
        self._entries: dict[Any, tuple[float, Any]] = {}

    def remember(self, key: Any, value: Any, now: float) -> None:
        self._entries[key] = (now, value)

    def recall(self, key: Any, now: float) -> tuple[float, Any] | None:
        """Return ``(recorded_at, value)`` for ``key``, or None if absent or stale."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if now - entry[0] > self.max_age:
            del self._entries[key]
            return None
        return entry

    def purge(self, now: float) -> int:
        """Drop every stale entry; returns how many were dropped."""
        stale = [key for key, (at, _) in self._entries.items() if now - at > self.max_age]
        for key in stale:
            del self._entries[key]
        return len(stale)


class SnapshotCollector:
    """
    Builds SystemSnapshot objects from psutil.

    Per-partition, per-sensor and per-process failures are skipped, and so
    is a partition table that cannot be read. Only a failure of the core
    readings (CPU, memory, the process table) fails the whole sample.
    """

    PROCESS_ATTRS = ["pid", "name", "ppid", "cpu_percent", "memory_percent", "io_counters"]

    def __init__(self, config: CollectorConfig | None = None, stale_after: float = 60.0) -> None:
        """
        Initialize the SnapshotCollector.

        Args:
            config: Temperature unit and average-CPU selection.
            stale_after: Seconds after which cached I/O counters are discarded.
        """
        self.config = config or CollectorConfig()
        self.tracker = StalenessTracker(stale_after)
        # Initialize CPU percent (first call returns 0.0)
        psutil.cpu_percent(percpu=True)

    def collect(self) -> SystemSnapshot:
        """Collect a snapshot of the current system state."""
        now = time.monotonic()
        try:
            per_core = psutil.cpu_percent(percpu=True)
            mem = psutil.virtual_memory()
            swap = psutil.swap_memory()
        except (psutil.Error, OSError) as e:
            raise CollectionError(f"core metrics unavailable: {e}") from e

        cpu_average = None
        if self.config.show_average_cpu and per_core:
            cpu_average = CpuReading("AVG", sum(per_core) / len(per_core))

        network, network_total = self._collect_network()
        try:
            processes = self._collect_processes(now)
        except (psutil.Error, OSError) as e:
            raise CollectionError(f"process table unavailable: {e}") from e
        self.tracker.purge(now)

        return SystemSnapshot(
            timestamp=now,
            cpu_per_core=tuple(CpuReading(f"CPU{i}", pct) for i, pct in enumerate(per_core)),
            cpu_average=cpu_average,
            memory_used=mem.used,
            memory_total=mem.total,
            swap_used=swap.used,
            swap_total=swap.total,
            network=network,
            network_total=network_total,
            disks=self._collect_disks(),
            temperatures=self._collect_temperatures(),
            processes=processes,
        )

    def _collect_network(self) -> tuple[dict[str, NetworkCounters] | None, NetworkCounters | None]:
        try:
            counters = psutil.net_io_counters(pernic=True)
        except (psutil.Error, OSError) as e:
            log.warning("network_unavailable", error=str(e))
            return None, None
        network = {
            name: NetworkCounters(rx_bytes=c.bytes_recv, tx_bytes=c.bytes_sent)
            for name, c in counters.items()
        }
        total = NetworkCounters(
            rx_bytes=sum(c.rx_bytes for c in network.values()),
            tx_bytes=sum(c.tx_bytes for c in network.values()),
        )
        return network, total

    def _collect_disks(self) -> tuple[DiskUsage, ...]:
        try:
            partitions = psutil.disk_partitions(all=False)
        except (psutil.Error, OSError) as e:
            log.warning("disks_unavailable", error=str(e))
            return ()

        disks: list[DiskUsage] = []
        for part in partitions:
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except (PermissionError, OSError):
                # Unmounted media, restricted mounts
                continue
            disks.append(
                DiskUsage(
                    device=part.device,
                    mount_point=part.mountpoint,
                    used=usage.used,
                    total=usage.total,
                    percent=usage.percent,
                )
            )
        return tuple(disks)

    def _collect_temperatures(self) -> tuple[TemperatureReading, ...] | None:
        """Read sensors, or None where the platform has no sensor support."""
        read_sensors = getattr(psutil, "sensors_temperatures", None)
        if read_sensors is None:
            return None
        try:
            sensors = read_sensors()
        except (psutil.Error, OSError) as e:
            log.warning("sensors_unavailable", error=str(e))
            return None

        unit = self.config.temperature_unit
        readings: list[TemperatureReading] = []
        for chip, entries in sensors.items():
            for index, entry in enumerate(entries):
                label = entry.label or f"{chip}{index}"
                readings.append(TemperatureReading(label, unit.from_celsius(entry.current)))
        return tuple(readings)

    def _collect_processes(self, now: float) -> tuple[ProcessSnapshot, ...]:
        """
        Collect snapshots of all running processes.

        Disk I/O counters are cumulative, so rates come from the difference
        with the previous reading the tracker still holds for that pid.
        """
        processes: list[ProcessSnapshot] = []

        for proc in psutil.process_iter(attrs=self.PROCESS_ATTRS):
            try:
                with proc.oneshot():
                    info = proc.info
                    pid = info.get("pid", 0)
                    read_rate, write_rate = self._io_rates(pid, info.get("io_counters"), now)

                    processes.append(
                        ProcessSnapshot(
                            pid=pid,
                            name=info.get("name") or "",
                            cpu_percent=info.get("cpu_percent") or 0.0,
                            memory_percent=info.get("memory_percent") or 0.0,
                            read_rate=read_rate,
                            write_rate=write_rate,
                            parent_pid=info.get("ppid"),
                        )
                    )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                # Died mid-poll, not ours, or a zombie
                continue

        return tuple(processes)

    def _io_rates(self, pid: int, io: Any, now: float) -> tuple[float | None, float | None]:
        if io is None:
            return None, None
        previous = self.tracker.recall(pid, now)
        self.tracker.remember(pid, (io.read_bytes, io.write_bytes), now)
        if previous is None:
            return None, None

        at, (prev_read, prev_write) = previous
        elapsed = now - at
        if elapsed <= 0:
            return None, None
        return (
            max(0.0, (io.read_bytes - prev_read) / elapsed),
            max(0.0, (io.write_bytes - prev_write) / elapsed),
        )
