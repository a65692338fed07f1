"""Sampler source: collects snapshots on a timer and feeds them to the coordinator."""

import threading
import time
from enum import Enum
from typing import Protocol

import structlog

from sysdash.collector import CollectionError
from sysdash.events import ChannelClosed, EventChannel, Update
from sysdash.models import SystemSnapshot

log = structlog.get_logger()

# Longest single sleep; longer intervals are waited out in chunks
MAX_SLEEP = 3600.0


def wait(seconds: float, limit: float = MAX_SLEEP, sleep=time.sleep) -> None:
    """Sleep for ``seconds``, never more than ``limit`` per call."""
    while seconds > 0:
        chunk = min(seconds, limit)
        sleep(chunk)
        seconds -= chunk


class Collector(Protocol):
    def collect(self) -> SystemSnapshot: ...


class SamplerState(Enum):
    """Where the sampler is in its schedule."""

    FIRST_SAMPLE = "first_sample"
    STEADY = "steady"


class SamplerSource:
    """
    Periodic snapshot producer running in a daemon thread.

    The first snapshot is taken as soon as the thread starts, followed by a
    short warm-up pause. From then on each tick waits the full interval
    before sampling, so data arrives quickly even with a long interval.
    Nothing is shared with the consumer except the channel: once it is
    closed, the next send fails and the thread exits.
    """

    def __init__(
        self,
        channel: EventChannel,
        collector: Collector,
        interval: float = 1.0,
        warmup: float = 0.25,
    ) -> None:
        """
        Initialize the SamplerSource.

        Args:
            channel: Channel that Update events are sent on.
            collector: Anything with a ``collect() -> SystemSnapshot`` method.
            interval: Seconds between samples once steady.
            warmup: Pause after the first sample; capped at ``interval``.
        """
        self._channel = channel
        self._collector = collector
        self._interval = interval
        self._warmup = min(warmup, interval)
        self._thread: threading.Thread | None = None
        self.state = SamplerState.FIRST_SAMPLE

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        """Check if the sampler thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sampling thread."""
        if self.is_running:
            return

        self._thread = threading.Thread(
            target=self.run,
            daemon=True,
            name="SamplerSource",
        )
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def run(self) -> None:
        """Sampling loop; returns once the channel has been closed."""
        log.info("sampler_started", interval=self._interval, warmup=self._warmup)
        while True:
            if self.state is SamplerState.STEADY:
                wait(self._interval)

            try:
                self._sample()
            except ChannelClosed:
                break

            if self.state is SamplerState.FIRST_SAMPLE:
                wait(self._warmup)
                self.state = SamplerState.STEADY
        log.info("sampler_stopped")

    def _sample(self) -> None:
        """Collect one snapshot and send it; a failed collection skips the tick."""
        if self._channel.closed:
            raise ChannelClosed("consumer gone")
        try:
            snapshot = self._collector.collect()
        except CollectionError as e:
            log.warning("sample_failed", error=str(e), state=self.state.value)
            return
        self._channel.send(Update(snapshot))
