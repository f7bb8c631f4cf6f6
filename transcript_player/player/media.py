"""Notification/command contract for playback backends.

WHY: The playback controller must work with any backend that can decode
and play audio (a desktop audio library, a browser element behind a
bridge, or the virtual clock used by the CLI). Defining the contract as a
small abstract class keeps the controller independent of all of them.

HOW: MediaEvent names the notifications a backend emits. MediaResource is
the abstract command surface plus listener registration. BaseMediaResource
implements the listener bookkeeping so concrete backends only implement
the four commands and call emit().

RULES:
- Notifications and their arguments:
    METADATA_READY(duration), TIME_UPDATED(t), PLAYBACK_STARTED,
    PLAYBACK_PAUSED, PLAYBACK_ENDED, PLAYBACK_FAILED(reason)
- Commands: set_source(source), play(), pause(), seek_to(t), close()
- Commands return immediately; their effects arrive as notifications
- remove_listener() of an unknown callback is a no-op
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

Listener = Callable[..., None]


class MediaEvent(str, enum.Enum):
    """Notifications emitted by a media resource."""

    METADATA_READY = "metadata_ready"
    TIME_UPDATED = "time_updated"
    PLAYBACK_STARTED = "playback_started"
    PLAYBACK_PAUSED = "playback_paused"
    PLAYBACK_ENDED = "playback_ended"
    PLAYBACK_FAILED = "playback_failed"


class MediaResource(ABC):
    """Abstract playback backend.

    To add a new backend:
    1. Subclass BaseMediaResource
    2. Implement set_source(), play(), pause() and seek_to()
    3. Call self.emit(...) as the underlying player reports progress
    """

    @abstractmethod
    def add_listener(self, event: MediaEvent, callback: Listener) -> None:
        """Register callback for one notification type."""

    @abstractmethod
    def remove_listener(self, event: MediaEvent, callback: Listener) -> None:
        """Unregister a callback previously passed to add_listener()."""

    @abstractmethod
    def set_source(self, source: Any) -> None:
        """Bind a playable source; duration arrives later via METADATA_READY."""

    @abstractmethod
    def play(self) -> None:
        """Start or resume playback."""

    @abstractmethod
    def pause(self) -> None:
        """Pause playback, keeping the position."""

    @abstractmethod
    def seek_to(self, position: float) -> None:
        """Move the playback position to ``position`` seconds."""

    def close(self) -> None:
        """Release backend resources. Default: nothing to release."""


class BaseMediaResource(MediaResource):
    """MediaResource with listener bookkeeping and an emit() helper."""

    def __init__(self) -> None:
        self._listeners: dict[MediaEvent, list[Listener]] = {
            event: [] for event in MediaEvent
        }

    def add_listener(self, event: MediaEvent, callback: Listener) -> None:
        self._listeners[MediaEvent(event)].append(callback)

    def remove_listener(self, event: MediaEvent, callback: Listener) -> None:
        callbacks = self._listeners[MediaEvent(event)]
        if callback in callbacks:
            callbacks.remove(callback)

    def listener_count(self, event: MediaEvent | None = None) -> int:
        if event is not None:
            return len(self._listeners[MediaEvent(event)])
        return sum(len(callbacks) for callbacks in self._listeners.values())

    def emit(self, event: MediaEvent, *args: Any) -> None:
        """Deliver a notification to every listener registered for it."""
        for callback in list(self._listeners[MediaEvent(event)]):
            callback(*args)
