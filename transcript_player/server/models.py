"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: Each endpoint has its own response model; the segmentation and
lookup endpoints also take JSON request bodies. Conversions to and from
the core dataclasses live next to the models that need them.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Times are float seconds, word ranges are inclusive index pairs
- Python 3.9+ compatible (use Optional/List from typing in models)
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from transcript_player.config import WORDS_PER_LINE
from transcript_player.core.ir import TranscriptLine, Word


class WordModel(BaseModel):
    """One timestamped word."""

    text: str = Field(description="Word text as returned by the provider.")
    start: float = Field(description="Start time in seconds.")
    end: float = Field(description="End time in seconds.")

    @classmethod
    def from_word(cls, word: Word) -> WordModel:
        return cls(text=word.text, start=word.start, end=word.end)

    def to_word(self) -> Word:
        return Word(text=self.text, start=self.start, end=self.end)


class LineModel(BaseModel):
    """One display line built from consecutive words."""

    text: str = Field(description="Words joined with single spaces.")
    start: float = Field(description="Start time of the first word, in seconds.")
    end: float = Field(description="End time of the last word, in seconds.")
    word_range: Tuple[int, int] = Field(
        description="Inclusive (first, last) indices into the word list."
    )

    @classmethod
    def from_line(cls, line: TranscriptLine) -> LineModel:
        return cls(text=line.text, start=line.start, end=line.end, word_range=line.word_range)

    def to_line(self) -> TranscriptLine:
        return TranscriptLine(
            text=self.text,
            start=self.start,
            end=self.end,
            word_range=(self.word_range[0], self.word_range[1]),
        )


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LinesRequest(BaseModel):
    """Words to group into display lines."""

    words: List[WordModel] = Field(description="Words in chronological order.")
    words_per_line: int = Field(
        default=WORDS_PER_LINE,
        description="Words per line; the last line may be shorter. Must be >= 1.",
    )


class ActiveLineRequest(BaseModel):
    """Playback time and the lines to search."""

    current_time: float = Field(description="Playback position in seconds.")
    lines: List[LineModel] = Field(description="Lines in display order.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class TranscriptionResult(BaseModel):
    """A finished transcription together with its display lines."""

    text: str = Field(description="Full transcript text.")
    language: str = Field(description="Language reported by the provider.")
    duration: float = Field(description="Audio duration in seconds.")
    words: List[WordModel] = Field(description="Word-level timestamps.")
    lines: List[LineModel] = Field(description="Words grouped into display lines.")
    request_id: Optional[str] = Field(
        default=None,
        description="Provider request identifier, when reported.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "text": "merhaba dünya",
                "language": "turkish",
                "duration": 1.2,
                "words": [
                    {"text": "merhaba", "start": 0.0, "end": 0.6},
                    {"text": "dünya", "start": 0.6, "end": 1.2},
                ],
                "lines": [
                    {"text": "merhaba dünya", "start": 0.0, "end": 1.2, "word_range": [0, 1]},
                ],
                "request_id": "req_01hx",
            }
        ]
    }}


class LinesResponse(BaseModel):
    lines: List[LineModel] = Field(description="Lines partitioning the input words.")


class ActiveLineResponse(BaseModel):
    index: Optional[int] = Field(
        default=None,
        description="Index of the active line, or null when no line contains the time.",
    )


class LanguageInfo(BaseModel):
    code: str = Field(description="ISO 639-1 language code.")
    label: str = Field(description="Human-readable language name.")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
    credential_configured: bool = Field(
        description="Whether a provider API key is stored on the server."
    )
