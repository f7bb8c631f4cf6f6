"""Dataclasses for words, display lines and playback snapshots.

WHY: The provider returns a flat list of timestamped words. The display
needs those words grouped into lines, and every consumer of the playback
clock needs a consistent view of the transport state. These types are the
contract between the segmenter, the locator, the controller and the
presentation layers.

HOW: Three frozen dataclasses and one enum:
  Word           — one timestamped word from the provider
  TranscriptLine — a contiguous run of words shown as one line
  PlaybackStatus — the controller's state-machine state
  PlaybackState  — an immutable snapshot of the transport state

RULES:
- All times are float seconds
- Word.start <= Word.end for every well-formed word
- Lines partition the word sequence exactly (see TranscriptLine)
- PlaybackState is a snapshot; only PlaybackController creates new ones
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


@dataclass(frozen=True)
class Word:
    """A single timestamped word.

    RULES:
    - text may be empty or whitespace; it is carried as-is
    - start/end are float seconds, start <= end
    - Sequence order is the provider's order, assumed chronological
    """

    text: str
    start: float
    end: float


@dataclass(frozen=True)
class TranscriptLine:
    """A contiguous run of words grouped for display.

    WHY: Highlighting one word at a time flickers; highlighting a whole
    line is readable. word_range keeps each line traceable back to the
    provider's words.

    RULES:
    - text: the words' texts joined with a single space, in order
    - start: start of the first word; end: end of the last word
    - word_range: inclusive (first, last) indices into the word sequence
    - For consecutive lines, lines[i].word_range[1] + 1 == lines[i+1].word_range[0]
    - lines[i].end <= lines[i+1].start is NOT guaranteed
    """

    text: str
    start: float
    end: float
    word_range: tuple[int, int]

    @property
    def word_count(self) -> int:
        return self.word_range[1] - self.word_range[0] + 1

    @property
    def duration(self) -> float:
        return self.end - self.start


class PlaybackStatus(str, enum.Enum):
    """States of the playback state machine.

    RULES:
    - unloaded: nothing to control; transport calls are no-ops
    - paused: a source is loaded and not advancing
    - playing: a source is loaded and the clock is advancing
    - ended: the resource reported end-of-stream
    """

    UNLOADED = "unloaded"
    PAUSED = "paused"
    PLAYING = "playing"
    ENDED = "ended"


@dataclass(frozen=True)
class PlaybackState:
    """Read-only snapshot of the transport state.

    RULES:
    - duration is 0.0 until the resource reports its metadata
    - current_time is non-decreasing while playing, except on seek
    - is_playing is True only in the PLAYING status
    """

    status: PlaybackStatus = PlaybackStatus.UNLOADED
    is_playing: bool = False
    current_time: float = 0.0
    duration: float = 0.0

    @property
    def is_loaded(self) -> bool:
        return self.status is not PlaybackStatus.UNLOADED

    @property
    def duration_known(self) -> bool:
        return self.duration > 0
