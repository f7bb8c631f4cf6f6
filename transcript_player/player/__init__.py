"""Playback state machine and media backends.

WHY: The transcript view needs one authoritative playback clock. The
controller produces it from whatever backend actually plays the audio.

HOW: media.py defines the backend contract, controller.py the state
machine, clock.py a silent asyncio backend used by the CLI and tests.

RULES:
- The controller talks to backends only through MediaResource
"""

from transcript_player.player.clock import ClockMediaResource
from transcript_player.player.controller import PlaybackController
from transcript_player.player.media import BaseMediaResource, MediaEvent, MediaResource

__all__ = [
    "BaseMediaResource",
    "ClockMediaResource",
    "MediaEvent",
    "MediaResource",
    "PlaybackController",
]
