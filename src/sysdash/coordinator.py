"""Event coordinator: the single consumer of the event channel."""

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from sysdash.events import ChannelClosed, EventChannel, KeyInput, MouseAction, MouseInput, Update
from sysdash.models import ProcessSnapshot, SystemSnapshot
from sysdash.state import AppState
from sysdash.transform import CanvasData, DisplayConfig, refresh_processes, transform

log = structlog.get_logger()

Renderer = Callable[[CanvasData, AppState], None]

QUIT_KEYS = frozenset({"ctrl+c", "ctrl+q", "escape"})


class RenderError(Exception):
    """Drawing failed; the terminal can no longer be trusted."""


@dataclass(slots=True, frozen=True)
class CoordinatorConfig:
    tick: float = 0.2  # Seconds between redraws when nothing arrives
    display: DisplayConfig = field(default_factory=DisplayConfig)


class EventCoordinator:
    """
    Merges input and sampler events into state updates and redraws.

    Events are handled strictly in arrival order. After each event, or after
    ``tick`` seconds without one, the renderer is called with the current
    buffers, unless the quit flag has been set.
    """

    def __init__(
        self,
        channel: EventChannel,
        renderer: Renderer,
        config: CoordinatorConfig | None = None,
        state: AppState | None = None,
    ) -> None:
        """
        Initialize the EventCoordinator.

        Args:
            channel: Channel both producers send on.
            renderer: Called with ``(canvas, state)``; must finish drawing
                before it returns.
            config: Tick duration and display settings.
            state: Initial application state.
        """
        self._channel = channel
        self._render = renderer
        self.config = config or CoordinatorConfig()
        self.state = state or AppState()
        self.canvas = CanvasData()
        self.snapshot: SystemSnapshot | None = None
        self.processes: list[ProcessSnapshot] = []

    def run(self) -> None:
        """
        Consume events until quit is requested or the channel is closed.

        Raises:
            RenderError: If the renderer fails. The channel is closed first.
        """
        log.info("coordinator_started", tick=self.config.tick)
        try:
            while True:
                try:
                    event = self._channel.receive(timeout=self.config.tick)
                except ChannelClosed:
                    log.info("channel_closed")
                    break

                if event is not None:
                    self.handle(event)
                    if self.state.should_quit:
                        break

                try:
                    self._render(self.canvas, self.state)
                except Exception as e:
                    log.exception("render_failed")
                    raise RenderError(str(e)) from e
        finally:
            self._channel.close()
        log.info("coordinator_stopped", quit=self.state.should_quit)

    def handle(self, event: object) -> None:
        """Apply one event to the state and buffers."""
        if isinstance(event, KeyInput):
            self._on_key(event.key)
        elif isinstance(event, MouseInput):
            self._on_mouse(event)
        elif isinstance(event, Update):
            self._on_update(event.snapshot)

    def _on_key(self, key: str) -> None:
        state = self.state
        if key in QUIT_KEYS:
            state.should_quit = True
        elif key in ("left", "h"):
            state.on_left()
        elif key in ("right", "l"):
            state.on_right()
        elif key in ("up", "k"):
            state.on_up()
        elif key in ("down", "j"):
            state.on_down()
        elif key == "f6":
            state.cycle_sort()
        elif len(key) == 1:
            state.on_char(key)

        if state.to_be_resorted:
            self.canvas = refresh_processes(self.canvas, self.processes, state.sort)
            state.to_be_resorted = False

    def _on_mouse(self, event: MouseInput) -> None:
        if event.action is MouseAction.WHEEL_UP:
            self.state.decrement_position()
        elif event.action is MouseAction.WHEEL_DOWN:
            self.state.increment_position()
        # Press, release and hold have no binding

    def _on_update(self, snapshot: SystemSnapshot) -> None:
        self.snapshot = snapshot
        self.processes = list(snapshot.processes)
        self.canvas = transform(snapshot, self.state.sort, self.canvas, self.config.display)
        self.state.set_process_count(len(self.canvas.processes))
        log.debug("update_applied", processes=len(self.processes))
