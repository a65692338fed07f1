"""sysdash - Main Textual application."""

import threading
from collections.abc import Iterator
from queue import SimpleQueue

from textual import events
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import DataTable, Footer, Sparkline, Static

from sysdash.collector import CollectorConfig, SnapshotCollector
from sysdash.config import Config
from sysdash.coordinator import CoordinatorConfig, EventCoordinator, RenderError
from sysdash.events import EventChannel
from sysdash.input import InputSource
from sysdash.monitor import Collector, SamplerSource
from sysdash.state import AppState, Panel
from sysdash.transform import CanvasData, DisplayConfig

_END = object()


class TerminalInput:
    """
    Blocking iterator over the raw key and mouse events textual delivers.

    The app feeds it from its event loop; the input source drains it from
    its own thread.
    """

    def __init__(self) -> None:
        self._queue: SimpleQueue[object] = SimpleQueue()

    def feed(self, signal: object) -> None:
        self._queue.put(signal)

    def close(self) -> None:
        """End the iteration once everything fed so far has been read."""
        self._queue.put(_END)

    def __iter__(self) -> Iterator[object]:
        while True:
            signal = self._queue.get()
            if signal is _END:
                return
            yield signal


def _bar(percent: float, color: str, width: int = 20) -> str:
    filled = min(int(percent / (100 / width)), width)
    return f"[{color}]█[/{color}]" * filled + "[dim]░[/dim]" * (width - filled)


def _latest(series: tuple[float, ...]) -> float:
    return series[-1] if series else 0.0


class HeaderStats(Static):
    """Header widget showing CPU, memory and swap utilization."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 5;
        padding: 0 1;
        background: $surface;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static("Loading CPU info...", id="cpu-info"),
            Static("Loading memory info...", id="mem-info"),
        )

    def update_stats(self, canvas: CanvasData) -> None:
        """Update the statistics from the display buffers."""
        cpu_info = self.query_one("#cpu-info", Static)
        mem_info = self.query_one("#mem-info", Static)
        if canvas.cpu_series:
            cpu_info.update(
                "\n".join(
                    f"{name:<5} \\[{_bar(_latest(points), 'green')}] {_latest(points):5.1f}%"
                    for name, points in canvas.cpu_series.items()
                )
            )
        if canvas.mem_series:
            mem_info.update(
                f"Mem\\[{_bar(_latest(canvas.mem_series), 'cyan')}] {canvas.mem_display}\n"
                f"Swp\\[{_bar(_latest(canvas.swap_series), 'yellow')}] {canvas.swap_display}"
            )


class NetworkPanel(Container):
    """Receive and transmit rate history."""

    DEFAULT_CSS = """
    NetworkPanel {
        height: 6;
        border: solid $primary;
    }

    NetworkPanel Sparkline {
        height: 2;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("RX 0.0B/s  TX 0.0B/s", id="net-rates")
        yield Sparkline([], id="net-rx")
        yield Sparkline([], id="net-tx")

    def update_network(self, canvas: CanvasData) -> None:
        self.query_one("#net-rates", Static).update(
            f"RX {canvas.rx_display}  TX {canvas.tx_display}"
        )
        self.query_one("#net-rx", Sparkline).data = list(canvas.network_rx)
        self.query_one("#net-tx", Sparkline).data = list(canvas.network_tx)


class SysdashApp(App):
    """
    Main sysdash application.

    Textual only draws and delivers raw input here. State changes happen on
    the coordinator thread, which calls back into ``draw`` through
    ``call_from_thread`` and waits for each draw to finish.
    """

    TITLE = "sysdash"
    SUB_TITLE = "Terminal System Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
        height: auto;
    }

    Horizontal {
        height: auto;
    }

    #cpu-info {
        width: 1fr;
        padding-right: 2;
    }

    #mem-info {
        width: 1fr;
        padding-left: 2;
    }

    #tables {
        height: 10;
    }

    #disk-table, #temp-table {
        width: 1fr;
        border: solid $primary;
    }

    #process-table {
        height: 1fr;
        border: solid $primary;
    }

    .-selected {
        border: double $accent;
    }
    """

    def __init__(self, config: Config | None = None, collector: Collector | None = None) -> None:
        """Initialize the SysdashApp and its three workers."""
        super().__init__()
        self.config = config or Config()
        self._channel = EventChannel()
        self._terminal = TerminalInput()

        if collector is None:
            collector = SnapshotCollector(
                CollectorConfig(
                    temperature_unit=self.config.temperature_unit,
                    show_average_cpu=self.config.show_average_cpu,
                ),
                stale_after=self.config.stale_after_ms / 1000,
            )
        self._sampler = SamplerSource(
            self._channel,
            collector,
            interval=self.config.refresh_seconds,
            warmup=self.config.warmup_ms / 1000,
        )
        self._input = InputSource(self._channel, self._terminal)
        self._coordinator = EventCoordinator(
            self._channel,
            self._render_from_thread,
            CoordinatorConfig(
                tick=self.config.tick_ms / 1000,
                display=DisplayConfig(
                    window_size=self.config.window_size,
                    show_average_cpu=self.config.show_average_cpu,
                    temperature_unit=self.config.temperature_unit,
                    stale_after=self.config.stale_after_ms / 1000,
                ),
            ),
        )
        self._coordinator_thread = threading.Thread(
            target=self._run_coordinator,
            daemon=True,
            name="EventCoordinator",
        )

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield NetworkPanel(id="network")
        yield Horizontal(
            DataTable(id="disk-table"),
            DataTable(id="temp-table"),
            id="tables",
        )
        yield Static("", id="sort-info")
        yield DataTable(id="process-table", cursor_type="row")
        yield Footer()

    def on_mount(self) -> None:
        """Set up the tables, then start input, sampling and coordination."""
        self.query_one("#disk-table", DataTable).add_columns("Disk", "Mount", "Used", "Total", "Use%")
        self.query_one("#temp-table", DataTable).add_columns("Sensor", "Temp")
        self.query_one("#process-table", DataTable).add_columns(
            "PID", "Name", "CPU%", "Mem%", "Read/s", "Write/s"
        )
        # Keys must reach the app, not the tables
        for table in self.query(DataTable):
            table.can_focus = False

        self._input.start()
        self._sampler.start()
        self._coordinator_thread.start()

    def on_unmount(self) -> None:
        self._channel.close()
        self._terminal.close()

    def on_key(self, event: events.Key) -> None:
        self._terminal.feed(event)

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self._terminal.feed(event)

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self._terminal.feed(event)

    def on_mouse_down(self, event: events.MouseDown) -> None:
        self._terminal.feed(event)

    def on_mouse_up(self, event: events.MouseUp) -> None:
        self._terminal.feed(event)

    async def action_quit(self) -> None:
        """Route textual's own quit binding through the coordinator."""
        self._terminal.feed(events.Key("ctrl+q", None))

    def _render_from_thread(self, canvas: CanvasData, state: AppState) -> None:
        self.call_from_thread(self.draw, canvas, state)

    def _run_coordinator(self) -> None:
        try:
            self._coordinator.run()
        except RenderError as e:
            self._exit_from_thread(return_code=1, message=f"sysdash: render failed: {e}")
            return
        self._exit_from_thread()

    def _exit_from_thread(self, return_code: int = 0, message: str | None = None) -> None:
        if self.is_running:
            self.call_from_thread(self.exit, None, return_code, message)

    def draw(self, canvas: CanvasData, state: AppState) -> None:
        """Redraw every panel from ``canvas``; runs on the textual event loop."""
        self.query_one("#header-stats", HeaderStats).update_stats(canvas)
        self.query_one("#network", NetworkPanel).update_network(canvas)

        disk_table = self.query_one("#disk-table", DataTable)
        disk_table.clear()
        disk_table.add_rows(canvas.disk_rows)

        temp_table = self.query_one("#temp-table", DataTable)
        temp_table.clear()
        if canvas.temp_rows is None:
            temp_table.add_row("No sensors", "N/A")
        else:
            temp_table.add_rows(canvas.temp_rows)

        arrow = "▼" if state.sort.descending else "▲"
        self.query_one("#sort-info", Static).update(
            f"Sort: {state.sort.column.value.upper()} {arrow}  ({state.panel.value})"
        )

        process_table = self.query_one("#process-table", DataTable)
        process_table.clear()
        process_table.add_rows(canvas.process_rows)
        if canvas.process_rows:
            process_table.move_cursor(row=state.selected_process)

        selected = {
            Panel.CPU: "#header-stats",
            Panel.MEMORY: "#header-stats",
            Panel.NETWORK: "#network",
            Panel.DISK: "#disk-table",
            Panel.TEMPERATURE: "#temp-table",
            Panel.PROCESS: "#process-table",
        }[state.panel]
        for widget_id in ("#header-stats", "#network", "#disk-table", "#temp-table", "#process-table"):
            self.query_one(widget_id).set_class(widget_id == selected, "-selected")
