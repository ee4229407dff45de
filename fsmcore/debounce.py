"""Debouncing, throttling and batching of events."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Generic, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class DebounceConfig:
    """Debounce settings; durations are in seconds."""

    delay: float = 0.3
    max_delay: float | None = 1.0
    leading: bool = False
    trailing: bool = True

    @classmethod
    def search_input(cls) -> DebounceConfig:
        """Wait 300 ms after the last keystroke, force after 1 s."""
        return cls(delay=0.3, max_delay=1.0, leading=False, trailing=True)

    @classmethod
    def redraw_throttle(cls) -> DebounceConfig:
        """About 60 fps with an immediate first redraw."""
        return cls(delay=0.016, max_delay=0.1, leading=True, trailing=False)

    @classmethod
    def fs_watch(cls) -> DebounceConfig:
        """Let filesystem changes settle for 500 ms, force after 2 s."""
        return cls(delay=0.5, max_delay=2.0, leading=False, trailing=True)


class Debouncer(Generic[T]):
    """Debounces keyed events; emitted ``(key, event)`` pairs go to ``output``."""

    def __init__(self, config: DebounceConfig) -> None:
        self.config = config
        self.output: asyncio.Queue[tuple[str, T]] = asyncio.Queue()
        self._last_events: dict[str, tuple[float, T]] = {}
        self._timers: set[asyncio.Task[None]] = set()

    async def submit(self, key: str, event: T) -> None:
        """Submit an event for debouncing."""
        log.debug("Debouncer received event for key: %s", key)
        if self.config.leading and key not in self._last_events:
            log.debug("Triggering leading edge event for key: %s", key)
            self.output.put_nowait((key, event))

        self._last_events[key] = (time.monotonic(), event)

        if self.config.trailing:
            timer = asyncio.create_task(self._emit_after_delay(key, event))
            self._timers.add(timer)
            timer.add_done_callback(self._timers.discard)

    async def _emit_after_delay(self, key: str, event: T) -> None:
        await asyncio.sleep(self.config.delay)
        log.debug("Debounce timer expired for key: %s", key)
        self.output.put_nowait((key, event))

    def flush(self) -> None:
        """Emit every pending event at once and forget them."""
        log.debug("Flushing all pending debounced events")
        pending, self._last_events = self._last_events, {}
        for key, (_, event) in pending.items():
            self.output.put_nowait((key, event))


class Throttler:
    """Allows an operation at most once per ``interval`` seconds."""

    def __init__(self, interval: float) -> None:
        self.interval = interval
        self._last_trigger: float | None = None

    def should_trigger(self) -> bool:
        """True if the interval has passed since the last allowed trigger."""
        now = time.monotonic()
        if self._last_trigger is None or now - self._last_trigger >= self.interval:
            self._last_trigger = now
            return True
        return False

    def reset(self) -> None:
        """Let the next call trigger regardless of timing."""
        self._last_trigger = None


class EventBatcher(Generic[T]):
    """Collects events and emits them as lists to ``output``."""

    def __init__(self, max_size: int, max_age: float) -> None:
        self.max_size = max_size
        self.max_age = max_age
        self.output: asyncio.Queue[list[T]] = asyncio.Queue()
        self._batch: list[T] = []
        self._last_flush = time.monotonic()

    async def add(self, event: T) -> None:
        """Add an event; flush when the batch is full or old enough."""
        self._batch.append(event)
        too_big = len(self._batch) >= self.max_size
        too_old = time.monotonic() - self._last_flush >= self.max_age
        if too_big or too_old:
            await self.flush()

    async def flush(self) -> None:
        """Emit the current batch, if any."""
        if not self._batch:
            return
        log.debug("Flushing batch of %d events", len(self._batch))
        batch, self._batch = self._batch, []
        self.output.put_nowait(batch)
        self._last_flush = time.monotonic()