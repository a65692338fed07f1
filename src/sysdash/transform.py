"""Turns a SystemSnapshot into render-ready display buffers."""

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from sysdash.models import NetworkCounters, ProcessSnapshot, SystemSnapshot, TemperatureUnit
from sysdash.sorting import SortState, sort_processes


@dataclass(slots=True, frozen=True)
class DisplayConfig:
    window_size: int = 60
    show_average_cpu: bool = False
    temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS
    stale_after: float = 60.0  # Seconds


@dataclass(slots=True, frozen=True)
class NetworkSample:
    """The counters the next network rate is diffed against."""

    timestamp: float
    counters: NetworkCounters


@dataclass(frozen=True)
class CanvasData:
    """
    Everything the renderer draws, derived from one snapshot.

    Instances are never modified; each Update produces a new one, so a draw
    can never observe a mix of two snapshots.
    """

    network_rx: tuple[float, ...] = ()
    network_tx: tuple[float, ...] = ()
    rx_display: str = "0.0B/s"
    tx_display: str = "0.0B/s"
    cpu_series: dict[str, tuple[float, ...]] = field(default_factory=dict)
    mem_series: tuple[float, ...] = ()
    swap_series: tuple[float, ...] = ()
    mem_display: str = ""
    swap_display: str = ""
    disk_rows: tuple[tuple[str, ...], ...] = ()
    temp_rows: tuple[tuple[str, str], ...] | None = ()
    processes: tuple[ProcessSnapshot, ...] = ()
    process_rows: tuple[tuple[str, ...], ...] = ()
    last_network: NetworkSample | None = None


_UNITS = ["B", "KiB", "MiB", "GiB", "TiB"]


def format_bytes(size: float) -> str:
    """Format bytes as human-readable string with binary units."""
    for unit in _UNITS[:-1]:
        if abs(size) < 1024:
            return f"{size:.1f}{unit}"
        size = size / 1024
    return f"{size:.1f}{_UNITS[-1]}"


def format_rate(bytes_per_second: float) -> str:
    return f"{format_bytes(bytes_per_second)}/s"


def roll(window: Iterable[float], value: float, capacity: int) -> tuple[float, ...]:
    """Append ``value`` to ``window``, keeping only the newest ``capacity`` points."""
    points = deque(window, maxlen=capacity)
    points.append(value)
    return tuple(points)


def network_rate(
    previous: NetworkSample | None,
    current: NetworkSample | None,
    stale_after: float,
) -> tuple[float, float]:
    """
    Compute (rx, tx) bytes per second between two counter readings.

    Without a usable previous reading (first snapshot, stale reading, or
    counters unavailable) the rate is zero. A counter that went backwards
    was reset, and yields zero rather than a negative rate.
    """
    if previous is None or current is None:
        return 0.0, 0.0
    elapsed = current.timestamp - previous.timestamp
    if elapsed <= 0 or elapsed > stale_after:
        return 0.0, 0.0
    rx = (current.counters.rx_bytes - previous.counters.rx_bytes) / elapsed
    tx = (current.counters.tx_bytes - previous.counters.tx_bytes) / elapsed
    return max(0.0, rx), max(0.0, tx)


def _optional_rate(rate: float | None) -> str:
    return "N/A" if rate is None else format_rate(rate)


def process_rows(processes: Iterable[ProcessSnapshot]) -> tuple[tuple[str, ...], ...]:
    return tuple(
        (
            str(proc.pid),
            proc.name,
            f"{proc.cpu_percent:.1f}%",
            f"{proc.memory_percent:.1f}%",
            _optional_rate(proc.read_rate),
            _optional_rate(proc.write_rate),
        )
        for proc in processes
    )


def disk_rows(snapshot: SystemSnapshot) -> tuple[tuple[str, ...], ...]:
    return tuple(
        (
            disk.device,
            disk.mount_point,
            format_bytes(disk.used),
            format_bytes(disk.total),
            f"{disk.percent:.0f}%",
        )
        for disk in snapshot.disks
    )


def temp_rows(snapshot: SystemSnapshot, unit: TemperatureUnit) -> tuple[tuple[str, str], ...] | None:
    """Sensor rows, or None when the platform reports no sensors at all."""
    if snapshot.temperatures is None:
        return None
    return tuple((t.sensor, f"{t.value:.1f}{unit.symbol}") for t in snapshot.temperatures)


def _cpu_series(
    snapshot: SystemSnapshot,
    previous: dict[str, tuple[float, ...]],
    config: DisplayConfig,
) -> dict[str, tuple[float, ...]]:
    readings = list(snapshot.cpu_per_core)
    if config.show_average_cpu and snapshot.cpu_average is not None:
        readings.insert(0, snapshot.cpu_average)
    return {
        cpu.name: roll(previous.get(cpu.name, ()), cpu.percent, config.window_size)
        for cpu in readings
    }


def refresh_processes(
    canvas: CanvasData,
    processes: Iterable[ProcessSnapshot],
    sort_state: SortState,
) -> CanvasData:
    """Return ``canvas`` with only the process table re-sorted and rebuilt."""
    ordered = tuple(sort_processes(processes, sort_state.column, sort_state.descending))
    return replace(canvas, processes=ordered, process_rows=process_rows(ordered))


def transform(
    snapshot: SystemSnapshot,
    sort_state: SortState,
    previous: CanvasData | None = None,
    config: DisplayConfig | None = None,
) -> CanvasData:
    """Build fresh display buffers from ``snapshot`` and the previous buffers."""
    config = config or DisplayConfig()
    previous = previous or CanvasData()
    capacity = config.window_size

    current_network = None
    if snapshot.network_total is not None:
        current_network = NetworkSample(snapshot.timestamp, snapshot.network_total)
    rx_rate, tx_rate = network_rate(previous.last_network, current_network, config.stale_after)

    ordered = tuple(sort_processes(snapshot.processes, sort_state.column, sort_state.descending))

    return CanvasData(
        network_rx=roll(previous.network_rx, rx_rate, capacity),
        network_tx=roll(previous.network_tx, tx_rate, capacity),
        rx_display=format_rate(rx_rate),
        tx_display=format_rate(tx_rate),
        cpu_series=_cpu_series(snapshot, previous.cpu_series, config),
        mem_series=roll(previous.mem_series, snapshot.memory_percent, capacity),
        swap_series=roll(previous.swap_series, snapshot.swap_percent, capacity),
        mem_display=f"{format_bytes(snapshot.memory_used)}/{format_bytes(snapshot.memory_total)}",
        swap_display=f"{format_bytes(snapshot.swap_used)}/{format_bytes(snapshot.swap_total)}",
        disk_rows=disk_rows(snapshot),
        temp_rows=temp_rows(snapshot, config.temperature_unit),
        processes=ordered,
        process_rows=process_rows(ordered),
        last_network=current_network,
    )
