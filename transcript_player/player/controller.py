"""Playback state machine over a single media resource.

WHY: The transcript view needs one authoritative playback clock and a
minimal transport (load/play/pause/toggle/seek). Media backends report
progress asynchronously and at their own cadence; the controller turns
those notifications into a consistent PlaybackState and is the only
component allowed to change it.

HOW: Each load() asks the resource factory for a fresh backend and binds
the controller's handlers to it. Every listener registration is paired
with its removal on an ExitStack, so a new load(), a playback failure or
close() releases exactly the registrations that were made. Handlers check
that the resource that called them is still the bound one, so late
notifications from a superseded resource are ignored.

States: UNLOADED → PAUSED (load) ⇄ PLAYING (play/pause) → ENDED (end of
stream). Any state → UNLOADED on PLAYBACK_FAILED.

RULES:
- play/pause/toggle/seek before any load() are no-ops
- load() resets current_time and duration to 0 and is_playing to False
- A load() whose resource cannot be created or bound leaves UNLOADED
  and re-raises
- close() publishes the UNLOADED snapshot
- play() sets is_playing immediately, even before metadata is known
- seek() clamps into [0, duration] only when duration is known, sets
  current_time immediately and never changes is_playing
- Seeking from ENDED moves to PAUSED
- TIME_UPDATED values are relayed without smoothing
- PLAYBACK_FAILED → UNLOADED, PlaybackError reported to error listeners,
  no retry
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import replace
from typing import Any

from transcript_player.core.ir import PlaybackState, PlaybackStatus
from transcript_player.errors import PlaybackError
from transcript_player.player.media import MediaEvent, MediaResource

logger = logging.getLogger(__name__)

StateListener = Callable[[PlaybackState], None]
ErrorListener = Callable[[PlaybackError], None]


class PlaybackController:
    """Owns the playback state for one media resource at a time."""

    def __init__(self, resource_factory: Callable[[], MediaResource]) -> None:
        self._resource_factory = resource_factory
        self._resource: MediaResource | None = None
        self._bindings: ExitStack | None = None
        self._state = PlaybackState()
        self._listeners: list[StateListener] = []
        self._error_listeners: list[ErrorListener] = []
        self.last_error: PlaybackError | None = None

    def __enter__(self) -> PlaybackController:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def current_time(self) -> float:
        return self._state.current_time

    @property
    def duration(self) -> float:
        return self._state.duration

    @property
    def progress(self) -> float:
        """Fraction of the source played, 0.0 while the duration is unknown."""
        if not self._state.duration_known:
            return 0.0
        return min(max(self._state.current_time / self._state.duration, 0.0), 1.0)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def add_listener(self, callback: StateListener) -> Callable[[], None]:
        """Call ``callback`` with a new snapshot on every state change.

        Returns:
            A callable that unregisters the callback.
        """
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def add_error_listener(self, callback: ErrorListener) -> Callable[[], None]:
        self._error_listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._error_listeners:
                self._error_listeners.remove(callback)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def load(self, source: Any) -> None:
        """Bind a new source, superseding any previous one."""
        self._release()
        self.last_error = None

        try:
            resource = self._resource_factory()
        except Exception:
            self._set_state(PlaybackState())
            raise

        bindings = ExitStack()
        bindings.callback(resource.close)
        for event, handler in self._handlers_for(resource).items():
            resource.add_listener(event, handler)
            bindings.callback(resource.remove_listener, event, handler)

        self._resource = resource
        self._bindings = bindings
        self._set_state(PlaybackState(status=PlaybackStatus.PAUSED))
        logger.debug("Loading source %r", source)
        try:
            resource.set_source(source)
        except Exception:
            self._release()
            self._set_state(PlaybackState())
            raise

    def play(self) -> None:
        if self._resource is None:
            return
        self._set_state(replace(
            self._state, status=PlaybackStatus.PLAYING, is_playing=True
        ))
        self._resource.play()

    def pause(self) -> None:
        if self._resource is None:
            return
        if self._state.status is PlaybackStatus.PLAYING:
            self._set_state(replace(
                self._state, status=PlaybackStatus.PAUSED, is_playing=False
            ))
        self._resource.pause()

    def toggle(self) -> None:
        if self._state.is_playing:
            self.pause()
        else:
            self.play()

    def seek(self, position: float) -> None:
        if self._resource is None:
            return
        position = float(position)
        if self._state.duration_known:
            position = min(max(position, 0.0), self._state.duration)

        status = self._state.status
        if status is PlaybackStatus.ENDED:
            status = PlaybackStatus.PAUSED
        self._set_state(replace(self._state, status=status, current_time=position))
        self._resource.seek_to(position)

    def seek_fraction(self, fraction: float) -> None:
        """Seek to a fraction of the duration; disabled until it is known."""
        if not self._state.duration_known:
            return
        fraction = min(max(float(fraction), 0.0), 1.0)
        self.seek(fraction * self._state.duration)

    def close(self) -> None:
        """Release the bound resource and its listener registrations."""
        self._release()
        self._set_state(PlaybackState())

    # ------------------------------------------------------------------
    # Resource notifications
    # ------------------------------------------------------------------

    def _handlers_for(self, resource: MediaResource) -> dict[MediaEvent, Callable[..., None]]:
        """Build handlers that ignore notifications from a stale resource."""

        def _bound(handler: Callable[..., None]) -> Callable[..., None]:
            def _guarded(*args: Any) -> None:
                if resource is not self._resource:
                    logger.debug("Ignoring notification from a superseded resource")
                    return
                handler(*args)

            return _guarded

        return {
            MediaEvent.METADATA_READY: _bound(self._on_metadata_ready),
            MediaEvent.TIME_UPDATED: _bound(self._on_time_updated),
            MediaEvent.PLAYBACK_STARTED: _bound(self._on_started),
            MediaEvent.PLAYBACK_PAUSED: _bound(self._on_paused),
            MediaEvent.PLAYBACK_ENDED: _bound(self._on_ended),
            MediaEvent.PLAYBACK_FAILED: _bound(self._on_failed),
        }

    def _on_metadata_ready(self, duration: float) -> None:
        duration = float(duration)
        if not math.isfinite(duration) or duration < 0:
            duration = 0.0
        self._set_state(replace(self._state, duration=duration))

    def _on_time_updated(self, position: float) -> None:
        self._set_state(replace(self._state, current_time=float(position)))

    def _on_started(self) -> None:
        self._set_state(replace(
            self._state, status=PlaybackStatus.PLAYING, is_playing=True
        ))

    def _on_paused(self) -> None:
        if self._state.status is PlaybackStatus.PLAYING:
            self._set_state(replace(
                self._state, status=PlaybackStatus.PAUSED, is_playing=False
            ))

    def _on_ended(self) -> None:
        self._set_state(replace(
            self._state, status=PlaybackStatus.ENDED, is_playing=False
        ))

    def _on_failed(self, reason: Any = "unknown error") -> None:
        error = PlaybackError(str(reason))
        logger.warning("%s", error)
        self._release()
        self.last_error = error
        self._set_state(PlaybackState())

        if not self._error_listeners:
            logger.error("Unhandled playback failure: %s", error.reason)
        for callback in list(self._error_listeners):
            callback(error)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _release(self) -> None:
        bindings, self._bindings = self._bindings, None
        self._resource = None
        if bindings is not None:
            bindings.close()

    def _set_state(self, state: PlaybackState) -> None:
        if state == self._state:
            return
        self._state = state
        for callback in list(self._listeners):
            callback(state)
