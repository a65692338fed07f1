"""Input source: turns raw terminal signals into typed events."""

import threading
from collections.abc import Iterable

import structlog
from textual import events

from sysdash.events import ChannelClosed, Event, EventChannel, KeyInput, MouseAction, MouseInput

log = structlog.get_logger()


def translate(signal: object) -> Event | None:
    """Map one raw signal to a KeyInput or MouseInput, or None if it is neither."""
    if isinstance(signal, events.Key):
        return KeyInput(signal.key)
    if isinstance(signal, events.MouseScrollUp):
        action = MouseAction.WHEEL_UP
    elif isinstance(signal, events.MouseScrollDown):
        action = MouseAction.WHEEL_DOWN
    elif isinstance(signal, events.MouseDown):
        action = MouseAction.PRESS
    elif isinstance(signal, events.MouseUp):
        action = MouseAction.RELEASE
    elif isinstance(signal, events.MouseMove) and signal.button:
        action = MouseAction.HOLD
    else:
        return None
    return MouseInput(action)


class InputSource:
    """
    Forwards every key and mouse signal to the channel, one event each.

    ``signals`` is any blocking iterable; the source reads it in a daemon
    thread until it is exhausted or the channel is closed.
    """

    def __init__(self, channel: EventChannel, signals: Iterable[object]) -> None:
        self._channel = channel
        self._signals = signals
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        """Check if the input thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the input thread."""
        if self.is_running:
            return

        self._thread = threading.Thread(
            target=self.run,
            daemon=True,
            name="InputSource",
        )
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def run(self) -> None:
        for signal in self._signals:
            event = translate(signal)
            if event is None:
                continue
            try:
                self._channel.send(event)
            except ChannelClosed:
                break
        log.debug("input_stopped")
