"""Typed events and the channel that carries them to the coordinator."""

from dataclasses import dataclass
from enum import Enum
from queue import Empty, Queue

from sysdash.models import SystemSnapshot


class ChannelClosed(Exception):
    """Raised on send to, or receive from, a closed and drained channel."""


class MouseAction(Enum):
    """Mouse actions the input source distinguishes."""

    WHEEL_UP = "wheel_up"
    WHEEL_DOWN = "wheel_down"
    PRESS = "press"
    RELEASE = "release"
    HOLD = "hold"


@dataclass(slots=True, frozen=True)
class KeyInput:
    """A single key press, named the way textual names keys ("q", "ctrl+c", "up")."""

    key: str


@dataclass(slots=True, frozen=True)
class MouseInput:
    action: MouseAction


@dataclass(slots=True, frozen=True)
class Update:
    """A freshly collected snapshot, handed over to the coordinator."""

    snapshot: SystemSnapshot


Event = KeyInput | MouseInput | Update

_CLOSED = object()


class EventChannel:
    """
    Unbounded multi-producer, single-consumer queue of events.

    Producers never block on ``send``. Once ``close`` has been called every
    further ``send`` raises ChannelClosed; the consumer still receives the
    events queued before the close, then gets ChannelClosed as well.
    """

    def __init__(self) -> None:
        """Initialize an open, empty channel."""
        self._queue: Queue[object] = Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        """Check whether the channel has been closed."""
        return self._closed

    def send(self, event: Event) -> None:
        """Queue an event for the consumer."""
        if self._closed:
            raise ChannelClosed("send on closed channel")
        self._queue.put(event)

    def receive(self, timeout: float | None = None) -> Event | None:
        """
        Wait up to ``timeout`` seconds for the next event.

        Returns:
            The next event, or None if none arrived in time.

        Raises:
            ChannelClosed: If the channel is closed and fully drained.
        """
        try:
            item = self._queue.get(timeout=timeout)
        except Empty:
            return None
        if item is _CLOSED:
            # Leave the marker for any later receive
            self._queue.put(_CLOSED)
            raise ChannelClosed("receive on closed channel")
        return item  # type: ignore[return-value]

    def close(self) -> None:
        """Close the channel; idempotent."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_CLOSED)
