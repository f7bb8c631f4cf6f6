"""Typed form of the provider's verbose_json transcription response.

WHY: The Groq transcription endpoint returns a JSON object with the full
text, the audio duration and a flat word list. Typed dataclasses make the
fields explicit and give the rest of the package core Word objects instead
of raw dicts.

HOW: TranscriptionResponse.from_dict() parses the raw response; to_dict()
produces the same shape again so a response can be saved and reloaded
later (load_transcript/save_transcript) without calling the provider.

RULES:
- The provider calls the word text field "word"; the core calls it "text"
- words keep the provider's order
- request_id comes from x_groq.id and is None when absent (or when
  x_groq is not an object)
- A body that is not a JSON object raises TypeError
- Parsing errors surface as KeyError/TypeError/ValueError; callers that
  talk to the provider wrap them in MalformedResponseError
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from transcript_player.core.ir import Word
from transcript_player.errors import MalformedResponseError


def word_from_dict(data: dict[str, Any]) -> Word:
    """Parse one provider word entry into a core Word."""
    return Word(
        text=str(data["word"]),
        start=float(data["start"]),
        end=float(data["end"]),
    )


@dataclass
class TranscriptionResponse:
    """Parsed verbose_json transcription response.

    RULES:
    - duration is the provider's audio duration in seconds
    - text is the provider's full plaintext (not used for segmentation)
    - words is the flat list the segmenter consumes
    """

    text: str
    duration: float
    words: list[Word] = field(default_factory=list)
    language: str = ""
    task: str = "transcribe"
    request_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TranscriptionResponse:
        if not isinstance(data, dict):
            raise TypeError(
                f"Expected a JSON object, got {type(data).__name__}"
            )
        x_groq = data.get("x_groq")
        if not isinstance(x_groq, dict):
            x_groq = {}
        return cls(
            text=str(data["text"]),
            duration=float(data.get("duration") or 0.0),
            words=[word_from_dict(w) for w in data["words"]],
            language=str(data.get("language") or ""),
            task=str(data.get("task") or "transcribe"),
            request_id=str(x_groq["id"]) if x_groq.get("id") is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "task": self.task,
            "language": self.language,
            "duration": self.duration,
            "text": self.text,
            "words": [
                {"word": w.text, "start": w.start, "end": w.end}
                for w in self.words
            ],
        }
        if self.request_id:
            data["x_groq"] = {"id": self.request_id}
        return data


def load_transcript(path: str | Path) -> TranscriptionResponse:
    """Load a previously saved verbose_json response from disk."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return TranscriptionResponse.from_dict(data)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        raise MalformedResponseError(
            f"Failed to parse transcript file {path.name}: {exc}"
        ) from exc


def save_transcript(response: TranscriptionResponse, path: str | Path) -> Path:
    path = Path(path)
    path.write_text(
        json.dumps(response.to_dict(), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return path
