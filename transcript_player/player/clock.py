"""Virtual-clock media backend driven by the asyncio event loop.

WHY: The controller is defined purely against the MediaResource contract.
The CLI follow-along mode and the tests need a backend that behaves like a
real player (asynchronous metadata, periodic time updates, end of stream)
without decoding or outputting audio.

HOW: set_source() schedules a probe task that resolves the duration and
emits METADATA_READY. While playing, loop.call_later() fires a tick every
tick_interval seconds; each tick computes the position from a monotonic
clock anchor and emits TIME_UPDATED. Reaching the duration emits a final
TIME_UPDATED(duration) and PLAYBACK_ENDED.

RULES:
- Must be used from inside a running event loop
- play() before metadata emits PLAYBACK_STARTED at once; ticking starts
  when the duration is known
- play() at the end of the stream restarts from 0
- A failing probe emits PLAYBACK_FAILED(reason)
- close() cancels the pending probe and tick
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable
from typing import Any, Union

from transcript_player.player.media import BaseMediaResource, MediaEvent

DurationProbe = Callable[[Any], Union[float, Awaitable[float]]]

DEFAULT_TICK_INTERVAL_S = 0.25


class ClockMediaResource(BaseMediaResource):
    """Silent playback backend that only advances a clock."""

    def __init__(
        self,
        probe: DurationProbe,
        tick_interval: float = DEFAULT_TICK_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        if tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        self._probe = probe
        self._tick_interval = tick_interval
        self._clock = clock
        self._loop: asyncio.AbstractEventLoop | None = None
        self._probe_task: asyncio.Task | None = None
        self._tick_handle: asyncio.TimerHandle | None = None
        self._duration: float | None = None
        self._position = 0.0
        self._anchor: float | None = None
        self._wants_play = False

    @property
    def position(self) -> float:
        return self._current_position()

    def set_source(self, source: Any) -> None:
        self._loop = asyncio.get_running_loop()
        self._cancel_tick()
        if self._probe_task is not None:
            self._probe_task.cancel()
        self._duration = None
        self._position = 0.0
        self._anchor = None
        self._wants_play = False
        self._probe_task = self._loop.create_task(self._resolve_duration(source))

    def play(self) -> None:
        if self._wants_play:
            return
        if self._duration is not None and self._position >= self._duration:
            self._position = 0.0
        self._wants_play = True
        self.emit(MediaEvent.PLAYBACK_STARTED)
        if self._duration is not None:
            self._start_ticking()

    def pause(self) -> None:
        if not self._wants_play:
            return
        self._position = self._current_position()
        self._wants_play = False
        self._anchor = None
        self._cancel_tick()
        self.emit(MediaEvent.PLAYBACK_PAUSED)

    def seek_to(self, position: float) -> None:
        position = max(float(position), 0.0)
        if self._duration is not None:
            position = min(position, self._duration)
        self._position = position
        if self._anchor is not None:
            self._anchor = self._clock()
        self.emit(MediaEvent.TIME_UPDATED, position)

    def close(self) -> None:
        self._cancel_tick()
        if self._probe_task is not None:
            self._probe_task.cancel()
            self._probe_task = None
        self._wants_play = False
        self._anchor = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _resolve_duration(self, source: Any) -> None:
        try:
            duration = self._probe(source)
            if inspect.isawaitable(duration):
                duration = await duration
            duration = float(duration)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # reported through the notification contract
            self.emit(MediaEvent.PLAYBACK_FAILED, str(exc) or type(exc).__name__)
            return

        if duration < 0:
            self.emit(MediaEvent.PLAYBACK_FAILED, f"invalid duration {duration}")
            return

        self._duration = duration
        self._position = min(self._position, duration)
        self.emit(MediaEvent.METADATA_READY, duration)
        if self._wants_play:
            self._start_ticking()

    def _start_ticking(self) -> None:
        self._anchor = self._clock()
        self._schedule_tick()

    def _schedule_tick(self) -> None:
        assert self._loop is not None
        self._tick_handle = self._loop.call_later(self._tick_interval, self._tick)

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _current_position(self) -> float:
        if self._anchor is None:
            return self._position
        return self._position + (self._clock() - self._anchor)

    def _tick(self) -> None:
        self._tick_handle = None
        if not self._wants_play or self._duration is None:
            return

        position = self._current_position()
        self._position = position
        self._anchor = self._clock()

        if position >= self._duration:
            self._position = self._duration
            self._wants_play = False
            self._anchor = None
            self.emit(MediaEvent.TIME_UPDATED, self._duration)
            self.emit(MediaEvent.PLAYBACK_ENDED)
            return

        self.emit(MediaEvent.TIME_UPDATED, position)
        if self._wants_play:
            self._schedule_tick()
