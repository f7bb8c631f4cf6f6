"""Mapping of the playback clock to the active transcript line.

WHY: The view highlights the line being spoken. Every playback tick
produces a new time, and the active line has to be recomputed from that
time and the (fixed) line list.

HOW: find_active_line() is the reference linear scan. ActiveLineLocator
wraps one line list and answers the same question faster: when the lines
are start-sorted and non-overlapping it tries the previously matched line
and its neighbours first, then falls back to a binary search. For any
other line list it uses the linear scan directly.

RULES:
- A line matches when line.start <= t < line.end (start inclusive, end exclusive)
- The first matching line wins
- No match → None (before the first line, after the last, inside gaps)
- At a shared boundary lines[i].end == lines[i+1].start the result is i + 1
- Zero-width lines (start == end) never match
- ActiveLineLocator always returns exactly what find_active_line returns
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Sequence

from transcript_player.core.ir import TranscriptLine


def find_active_line(
    current_time: float,
    lines: Sequence[TranscriptLine],
) -> int | None:
    """Return the index of the first line containing current_time, or None."""
    for index, line in enumerate(lines):
        if line.start <= current_time < line.end:
            return index
    return None


def _is_disjoint(lines: Sequence[TranscriptLine]) -> bool:
    """True when every line is well-formed and ends before the next starts."""
    for current, following in zip(lines, lines[1:]):
        if not (current.start <= current.end <= following.start):
            return False
    return not lines or lines[-1].start <= lines[-1].end


class ActiveLineLocator:
    """Cached active-line lookup over a fixed line list.

    WHY: find_active_line is called once per playback tick. During normal
    playback the answer is either unchanged or the next line, so checking
    those first avoids rescanning long transcripts.

    HOW: On construction, checks whether the lines are pairwise disjoint
    and sorted. Only in that case can at most one line contain a given
    time, which makes any hit authoritative. The cache holds the last
    matched index and is purely a lookup hint.

    RULES:
    - The line list is copied and never mutated
    - locate() results are identical to find_active_line()
    """

    def __init__(self, lines: Sequence[TranscriptLine]) -> None:
        self._lines = tuple(lines)
        self._disjoint = _is_disjoint(self._lines)
        self._starts = [line.start for line in self._lines]
        self._last_index: int | None = None

    @property
    def lines(self) -> tuple[TranscriptLine, ...]:
        return self._lines

    def locate(self, current_time: float) -> int | None:
        if not self._disjoint:
            return find_active_line(current_time, self._lines)

        if self._last_index is not None:
            for candidate in (self._last_index, self._last_index + 1, self._last_index - 1):
                if 0 <= candidate < len(self._lines) and self._contains(candidate, current_time):
                    self._last_index = candidate
                    return candidate

        # Rightmost line starting at or before current_time
        index = bisect_right(self._starts, current_time) - 1
        if index >= 0 and self._contains(index, current_time):
            self._last_index = index
            return index
        return None

    def _contains(self, index: int, current_time: float) -> bool:
        line = self._lines[index]
        return line.start <= current_time < line.end
