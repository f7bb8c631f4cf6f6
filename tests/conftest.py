"""Shared test fixtures for the transcript_player test suite.

WHY: Several test modules need the same provider response, the same word
list and a controllable media backend. Centralizing them here keeps the
expected values in one place.

HOW: SAMPLE_RESPONSE mirrors the provider's verbose_json shape (word
entries use the provider's "word" key). FakeMediaResource records the
commands it receives and lets tests emit notifications by hand, so the
controller can be driven deterministically without an event loop.

RULES:
- Timestamps in SAMPLE_RESPONSE are contiguous except for one gap (2.0 → 2.4)
- No test talks to the real provider
- The provider API key is removed from the environment for every test
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List

import pytest

from transcript_player.core.ir import Word
from transcript_player.player.controller import PlaybackController
from transcript_player.player.media import BaseMediaResource, MediaEvent


SAMPLE_RESPONSE: Dict[str, Any] = {
    "task": "transcribe",
    "language": "english",
    "duration": 3.5,
    "text": "How are you doing today? I am fantastic, thank you.",
    "words": [
        {"word": "How",        "start": 0.0, "end": 0.3},
        {"word": "are",        "start": 0.3, "end": 0.5},
        {"word": "you",        "start": 0.5, "end": 0.8},
        {"word": "doing",      "start": 0.8, "end": 1.2},
        {"word": "today?",     "start": 1.2, "end": 2.0},
        {"word": "I",          "start": 2.4, "end": 2.5},
        {"word": "am",         "start": 2.5, "end": 2.7},
        {"word": "fantastic,", "start": 2.7, "end": 3.1},
        {"word": "thank",      "start": 3.1, "end": 3.3},
        {"word": "you.",       "start": 3.3, "end": 3.5},
    ],
    "segments": [],
    "x_groq": {"id": "req_01jtestsample"},
}


class FakeMediaResource(BaseMediaResource):
    """MediaResource that records commands and emits nothing on its own."""

    def __init__(self) -> None:
        super().__init__()
        self.commands: List[tuple] = []
        self.closed = False

    def set_source(self, source: Any) -> None:
        self.commands.append(("set_source", source))

    def play(self) -> None:
        self.commands.append(("play",))

    def pause(self) -> None:
        self.commands.append(("pause",))

    def seek_to(self, position: float) -> None:
        self.commands.append(("seek_to", position))

    def close(self) -> None:
        self.closed = True

    # Notification shortcuts
    def metadata_ready(self, duration: float) -> None:
        self.emit(MediaEvent.METADATA_READY, duration)

    def time_updated(self, position: float) -> None:
        self.emit(MediaEvent.TIME_UPDATED, position)

    def started(self) -> None:
        self.emit(MediaEvent.PLAYBACK_STARTED)

    def paused(self) -> None:
        self.emit(MediaEvent.PLAYBACK_PAUSED)

    def ended(self) -> None:
        self.emit(MediaEvent.PLAYBACK_ENDED)

    def failed(self, reason: str) -> None:
        self.emit(MediaEvent.PLAYBACK_FAILED, reason)


class FakeResourceFactory:
    """Resource factory that keeps every resource it created."""

    def __init__(self) -> None:
        self.created: List[FakeMediaResource] = []

    def __call__(self) -> FakeMediaResource:
        resource = FakeMediaResource()
        self.created.append(resource)
        return resource

    @property
    def last(self) -> FakeMediaResource:
        return self.created[-1]


@pytest.fixture(autouse=True)
def _no_ambient_api_key(monkeypatch):
    """Keep a developer's real key out of every test.

    setenv first so monkeypatch restores the variable even when a test
    (or the code under test) writes it.
    """
    monkeypatch.setenv("GROQ_API_KEY", "")
    monkeypatch.delenv("GROQ_API_KEY")


@pytest.fixture
def sample_response() -> Dict[str, Any]:
    """Provider verbose_json response with ten words."""
    return copy.deepcopy(SAMPLE_RESPONSE)


@pytest.fixture
def sample_words() -> List[Word]:
    return [
        Word(text=w["word"], start=w["start"], end=w["end"])
        for w in SAMPLE_RESPONSE["words"]
    ]


@pytest.fixture
def resource_factory() -> FakeResourceFactory:
    return FakeResourceFactory()


@pytest.fixture
def controller(resource_factory) -> PlaybackController:
    return PlaybackController(resource_factory)


@pytest.fixture
def loaded_controller(controller, resource_factory):
    """Controller with a source loaded and duration 120s known."""
    controller.load("audio.mp3")
    resource_factory.last.metadata_ready(120.0)
    return controller
