"""Transcript session: selected file, transcript lines and the active line.

WHY: Something has to tie the pieces together the way the player screen
does: pick a file, load it into the playback controller, transcribe it
once, segment the words into lines once, and keep the highlighted line in
sync with every playback tick. This module is that consuming layer,
shared by the CLI and anything else that drives a player.

HOW: TranscriptSession subscribes to the controller's state snapshots.
On each snapshot it asks an ActiveLineLocator for the line at the current
time and notifies its own listeners only when the index changes. Lines are
built by split_into_lines() once per transcript and replaced wholesale.

RULES:
- Only one transcription may be pending at a time
  (TranscriptionInProgressError otherwise)
- A failed transcription leaves the previous transcript and lines untouched
- A result that arrives after a different file was selected is discarded
- Selecting a new file or calling reset() discards the transcript
- No line is active while the controller is unloaded
- The API key is held by the client passed to transcribe(), not here
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from transcript_player.api.client import GroqClient
from transcript_player.api.models import TranscriptionResponse
from transcript_player.config import DEFAULT_LANGUAGE, WORDS_PER_LINE, validate_audio_file
from transcript_player.core.ir import PlaybackState, TranscriptLine
from transcript_player.core.locator import ActiveLineLocator
from transcript_player.core.segmenter import check_words_per_line, split_into_lines
from transcript_player.errors import TranscriptionInProgressError, ValidationError
from transcript_player.player.controller import PlaybackController

logger = logging.getLogger(__name__)

ActiveLineListener = Callable[[Optional[int]], None]


class TranscriptSession:
    """State of one player screen."""

    def __init__(
        self,
        controller: PlaybackController,
        words_per_line: int = WORDS_PER_LINE,
        language: str = DEFAULT_LANGUAGE,
    ) -> None:
        self.controller = controller
        self.words_per_line = words_per_line
        self.language = language
        self.audio_path: Path | None = None
        self.transcript: TranscriptionResponse | None = None
        self.lines: tuple[TranscriptLine, ...] = ()
        self.active_line_index: int | None = None
        self.is_transcribing = False
        self.last_error: Exception | None = None
        self._locator: ActiveLineLocator | None = None
        self._active_listeners: list[ActiveLineListener] = []
        self._unsubscribe = controller.add_listener(self._on_playback_state)

    # ------------------------------------------------------------------
    # File and transcript lifecycle
    # ------------------------------------------------------------------

    def select_file(self, path: str | Path) -> Path:
        """Validate and load an audio file, discarding the old transcript."""
        audio_path = validate_audio_file(path)
        self.reset()
        self.audio_path = audio_path
        self.controller.load(audio_path)
        return audio_path

    async def transcribe(
        self,
        client: GroqClient,
        on_status: Callable[[str], None] | None = None,
    ) -> TranscriptionResponse:
        """Transcribe the selected file and install its lines.

        Raises:
            TranscriptionInProgressError: a transcription is already pending.
            ValidationError: no file is selected, or words_per_line is invalid.
            ProviderError: the provider call failed (state is unchanged).
        """
        if self.is_transcribing:
            raise TranscriptionInProgressError(
                "A transcription is already in progress for this file"
            )
        if self.audio_path is None:
            raise ValidationError("No audio file selected")
        check_words_per_line(self.words_per_line)

        audio_path = self.audio_path
        self.is_transcribing = True
        self.last_error = None
        try:
            response = await client.transcribe(
                audio_path, language=self.language, on_status=on_status
            )
            lines = split_into_lines(response.words, self.words_per_line)
        except Exception as exc:
            self.last_error = exc
            raise
        finally:
            self.is_transcribing = False

        if self.audio_path != audio_path:
            logger.info("Discarding transcript for %s; another file was selected", audio_path.name)
            return response

        self._install(response, lines)
        return response

    def apply_transcript(
        self,
        response: TranscriptionResponse,
        words_per_line: int | None = None,
    ) -> tuple[TranscriptLine, ...]:
        """Install an already available transcript (e.g. loaded from disk)."""
        if words_per_line is None:
            words_per_line = self.words_per_line
        lines = split_into_lines(response.words, words_per_line)
        self._install(response, lines)
        return self.lines

    def reset(self) -> None:
        """Discard the transcript and its lines."""
        self.transcript = None
        self.lines = ()
        self._locator = None
        self._set_active(None)

    def close(self) -> None:
        self._unsubscribe()
        self.controller.close()

    # ------------------------------------------------------------------
    # Active line
    # ------------------------------------------------------------------

    @property
    def active_line(self) -> TranscriptLine | None:
        if self.active_line_index is None:
            return None
        return self.lines[self.active_line_index]

    def add_active_line_listener(self, callback: ActiveLineListener) -> Callable[[], None]:
        """Call ``callback`` with the new index whenever the active line changes."""
        self._active_listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._active_listeners:
                self._active_listeners.remove(callback)

        return _unsubscribe

    def _install(self, response: TranscriptionResponse, lines: list[TranscriptLine]) -> None:
        self.transcript = response
        self._locator = ActiveLineLocator(lines)
        self.lines = self._locator.lines
        logger.info("Loaded transcript: %d words in %d lines", len(response.words), len(lines))
        self._set_active(self._locate(self.controller.state))

    def _on_playback_state(self, state: PlaybackState) -> None:
        if self._locator is None:
            return
        self._set_active(self._locate(state))

    def _locate(self, state: PlaybackState) -> int | None:
        if self._locator is None or not state.is_loaded:
            return None
        return self._locator.locate(state.current_time)

    def _set_active(self, index: int | None) -> None:
        if index == self.active_line_index:
            return
        self.active_line_index = index
        for callback in list(self._active_listeners):
            callback(index)
