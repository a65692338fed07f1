"""Data models for sysdash.

Every field that the collector could not read is ``None``. Consumers must
treat ``None`` as "unavailable", never as zero.
"""

from dataclasses import dataclass
from enum import Enum


class TemperatureUnit(Enum):
    """Unit that sensor readings are reported in."""

    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"
    KELVIN = "kelvin"

    @property
    def symbol(self) -> str:
        """Suffix used when displaying a reading."""
        return {"celsius": "°C", "fahrenheit": "°F", "kelvin": "K"}[self.value]

    def from_celsius(self, value: float) -> float:
        """Convert a Celsius reading into this unit."""
        if self is TemperatureUnit.FAHRENHEIT:
            return value * 9 / 5 + 32
        if self is TemperatureUnit.KELVIN:
            return value + 273.15
        return value


@dataclass(slots=True, frozen=True)
class ProcessSnapshot:
    """Immutable snapshot of a process state."""

    pid: int
    name: str
    cpu_percent: float  # 0.0 - 100.0 * core_count
    memory_percent: float
    read_rate: float | None = None  # Bytes/s
    write_rate: float | None = None  # Bytes/s
    parent_pid: int | None = None


@dataclass(slots=True, frozen=True)
class CpuReading:
    """Utilization of one core, or of the aggregate pseudo-core."""

    name: str
    percent: float


@dataclass(slots=True, frozen=True)
class NetworkCounters:
    """Cumulative byte counters of one interface (or the sum of all)."""

    rx_bytes: int
    tx_bytes: int


@dataclass(slots=True, frozen=True)
class DiskUsage:
    device: str
    mount_point: str
    used: int
    total: int
    percent: float


@dataclass(slots=True, frozen=True)
class TemperatureReading:
    sensor: str
    value: float  # In the configured unit


@dataclass(slots=True, frozen=True)
class SystemSnapshot:
    """One complete set of host metrics sampled at ``timestamp``.

    ``timestamp`` is taken from ``time.monotonic()`` so that rate
    computations are immune to wall-clock adjustments.
    """

    timestamp: float
    cpu_per_core: tuple[CpuReading, ...]
    cpu_average: CpuReading | None
    memory_used: int
    memory_total: int
    swap_used: int
    swap_total: int
    network: dict[str, NetworkCounters] | None
    network_total: NetworkCounters | None
    disks: tuple[DiskUsage, ...]
    temperatures: tuple[TemperatureReading, ...] | None
    processes: tuple[ProcessSnapshot, ...]

    @property
    def memory_percent(self) -> float:
        if self.memory_total == 0:
            return 0.0
        return self.memory_used / self.memory_total * 100

    @property
    def swap_percent(self) -> float:
        if self.swap_total == 0:
            return 0.0
        return self.swap_used / self.swap_total * 100
