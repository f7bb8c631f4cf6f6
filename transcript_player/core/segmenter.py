"""Fixed-size grouping of timestamped words into display lines.

WHY: The provider returns one entry per word. The transcript view shows
lines, so the words are grouped once, when a transcript is loaded, and the
resulting lines never change until the next load.

HOW: validate_words() rejects malformed timestamps. split_into_lines()
walks the word list in steps of words_per_line and builds one
TranscriptLine per slice. The last slice holds whatever is left.

RULES:
- words_per_line must be an int >= 1, otherwise ValidationError
- Empty input produces an empty list
- Line text is the words' texts joined with a single space
- Line start/end come from the first/last word of the slice
- word_range is the inclusive (first, last) index pair
- Overlapping or out-of-order timestamps between words are kept as-is
- No sentence-boundary or silence-gap segmentation
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from transcript_player.core.ir import TranscriptLine, Word
from transcript_player.errors import ValidationError

DEFAULT_WORDS_PER_LINE = 10


def validate_words(words: Sequence[Word]) -> None:
    """Check that every word carries a usable time interval.

    RULES:
    - start and end must be finite numbers (bools are rejected)
    - start must not exceed end
    - Raises ValidationError naming the first offending index
    """
    for index, word in enumerate(words):
        for name in ("start", "end"):
            value = getattr(word, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationError(
                    f"Word {index} has a non-numeric {name} timestamp: {value!r}"
                )
            if not math.isfinite(value):
                raise ValidationError(
                    f"Word {index} has a non-finite {name} timestamp: {value!r}"
                )
        if word.start > word.end:
            raise ValidationError(
                f"Word {index} ({word.text!r}) starts after it ends "
                f"({word.start} > {word.end})"
            )


def check_words_per_line(words_per_line: int) -> None:
    """Raise ValidationError unless words_per_line is an int >= 1."""
    if (
        isinstance(words_per_line, bool)
        or not isinstance(words_per_line, int)
        or words_per_line < 1
    ):
        raise ValidationError(
            f"words_per_line must be a positive integer, got {words_per_line!r}"
        )


def split_into_lines(
    words: Sequence[Word],
    words_per_line: int = DEFAULT_WORDS_PER_LINE,
) -> list[TranscriptLine]:
    """Group words into consecutive lines of words_per_line words.

    Args:
        words: Provider words in chronological order.
        words_per_line: Number of words per line; the last line may be shorter.

    Returns:
        Lines that partition ``words`` exactly, in order.
    """
    check_words_per_line(words_per_line)
    validate_words(words)

    lines: list[TranscriptLine] = []
    for first in range(0, len(words), words_per_line):
        chunk = words[first:first + words_per_line]
        lines.append(TranscriptLine(
            text=" ".join(w.text for w in chunk),
            start=float(chunk[0].start),
            end=float(chunk[-1].end),
            word_range=(first, first + len(chunk) - 1),
        ))
    return lines
