"""Command-line interface for the Transcript Player.

WHY: Users need a way to transcribe an audio file, inspect the resulting
lines, follow a transcript line by line in step with a playback clock, and
manage the stored API key from the terminal.

HOW: argparse with four subcommands:
  transcribe AUDIO   — validate the file, call the provider, save the
                       verbose JSON next to the audio, print the lines
  lines TRANSCRIPT   — print the lines of a saved transcript
  play TRANSCRIPT    — run the playback controller on a virtual clock
                       and print each line as it becomes active
  key set|clear|status — manage the stored API key
Async work runs via asyncio.run(). Status messages go to stderr; lines go
to stdout.

RULES:
- Validates the audio file and the line size before any provider call
- The API key is resolved once here and passed into GroqClient
- Output naming: {stem}-transcript.json, numeric suffix on conflict
- Errors print "Error: ..." to stderr and exit with status 1
- Ctrl+C exits with status 130
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import List, Optional

from transcript_player.api.client import GroqClient
from transcript_player.api.models import TranscriptionResponse, load_transcript, save_transcript
from transcript_player.config import (
    DEFAULT_LANGUAGE,
    SUPPORTED_LANGUAGES,
    WORDS_PER_LINE,
    load_api_key,
    validate_audio_file,
)
from transcript_player.core.credentials import CredentialStore
from transcript_player.core.ir import PlaybackState, PlaybackStatus, TranscriptLine
from transcript_player.core.segmenter import check_words_per_line, split_into_lines
from transcript_player.errors import PlaybackError, ProviderError
from transcript_player.player.clock import DEFAULT_TICK_INTERVAL_S, ClockMediaResource
from transcript_player.player.controller import PlaybackController
from transcript_player.session import TranscriptSession

_TRANSCRIPT_SUFFIX = "-transcript.json"


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def format_timestamp(seconds: float) -> str:
    """Format seconds as m:ss, the way the player's time display shows it."""
    seconds = max(seconds, 0.0)
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return "{}:{:02d}".format(minutes, secs)


def format_line(line: TranscriptLine) -> str:
    return "[{} - {}] {}".format(
        format_timestamp(line.start), format_timestamp(line.end), line.text
    )


def _print_lines(lines: Sequence[TranscriptLine]) -> None:
    for line in lines:
        print(format_line(line))


def _resolve_output_path(stem: str, output_dir: Path) -> Path:
    """Return {stem}-transcript.json, or {stem}-transcript-N.json if taken."""
    base_path = output_dir / "{}{}".format(stem, _TRANSCRIPT_SUFFIX)
    if not base_path.exists():
        return base_path

    counter = 2
    while True:
        candidate = output_dir / "{}-transcript-{}.json".format(stem, counter)
        if not candidate.exists():
            return candidate
        counter += 1


def _playback_duration(transcript: TranscriptionResponse) -> float:
    """Duration for the virtual clock: the provider's, else the last word end."""
    if transcript.duration > 0:
        return transcript.duration
    return max((w.end for w in transcript.words), default=0.0)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


async def _run_transcribe(args: argparse.Namespace) -> None:
    audio_path = validate_audio_file(Path(args.audio_file).resolve())
    check_words_per_line(args.words_per_line)
    api_key = load_api_key()

    _status("Transcribing {} ({})...".format(audio_path.name, SUPPORTED_LANGUAGES[args.language]))
    async with GroqClient(api_key) as client:
        response = await client.transcribe(audio_path, language=args.language, on_status=_status)

    lines = split_into_lines(response.words, args.words_per_line)

    if args.output:
        output_path = Path(args.output)
    else:
        output_path = _resolve_output_path(audio_path.stem, audio_path.parent)
    save_transcript(response, output_path)

    _status("  {} words, {} lines, {}s".format(
        len(response.words), len(lines), round(response.duration)
    ))
    _status("  Saved: {}".format(output_path))
    _print_lines(lines)


def _run_lines(args: argparse.Namespace) -> None:
    transcript = load_transcript(args.transcript)
    _print_lines(split_into_lines(transcript.words, args.words_per_line))


async def _run_play(args: argparse.Namespace) -> None:
    """Follow a saved transcript on a virtual playback clock."""
    transcript = load_transcript(args.transcript)
    duration = _playback_duration(transcript)

    controller = PlaybackController(
        lambda: ClockMediaResource(probe=lambda _source: duration, tick_interval=args.tick)
    )
    session = TranscriptSession(controller, words_per_line=args.words_per_line)
    finished = asyncio.Event()
    errors: List[PlaybackError] = []

    def _on_active(index: Optional[int]) -> None:
        if index is not None:
            print(format_line(session.lines[index]), flush=True)

    def _on_state(state: PlaybackState) -> None:
        if state.status is PlaybackStatus.ENDED:
            finished.set()

    def _on_error(error: PlaybackError) -> None:
        errors.append(error)
        finished.set()

    session.add_active_line_listener(_on_active)
    controller.add_listener(_on_state)
    controller.add_error_listener(_on_error)

    try:
        controller.load(Path(args.transcript))
        session.apply_transcript(transcript)
        _status("Playing {} lines ({})...".format(
            len(session.lines), format_timestamp(duration)
        ))
        if args.start:
            controller.seek(args.start)
        controller.play()
        await finished.wait()
    finally:
        session.close()

    if errors:
        raise errors[0]
    _status("Done.")


def _run_key(args: argparse.Namespace) -> None:
    store = CredentialStore()
    if args.key_command == "set":
        store.set(args.value)
        _status("API key saved to {}".format(store.path))
    elif args.key_command == "clear":
        store.clear()
        _status("API key removed.")
    else:
        print("configured" if store.has_credential else "not configured")


# ---------------------------------------------------------------------------
# Parser and entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="transcript-player",
        description="Transcribe audio with word timestamps and follow the "
                    "transcript line by line during playback.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    transcribe = subparsers.add_parser("transcribe", help="Transcribe an audio file.")
    transcribe.add_argument("audio_file", help="Path to an .m4a, .mp3 or .mp4 file.")
    transcribe.add_argument(
        "--language",
        default=DEFAULT_LANGUAGE,
        choices=sorted(SUPPORTED_LANGUAGES),
        help="Transcription language (default: %(default)s).",
    )
    transcribe.add_argument(
        "--output",
        default=None,
        help="Where to save the transcript JSON (default: next to the audio file).",
    )

    lines = subparsers.add_parser("lines", help="Print the lines of a saved transcript.")
    lines.add_argument("transcript", help="Path to a saved transcript JSON file.")

    play = subparsers.add_parser("play", help="Follow a saved transcript in real time.")
    play.add_argument("transcript", help="Path to a saved transcript JSON file.")
    play.add_argument(
        "--start",
        type=float,
        default=0.0,
        help="Start position in seconds (default: %(default)s).",
    )
    play.add_argument(
        "--tick",
        type=float,
        default=DEFAULT_TICK_INTERVAL_S,
        help="Clock update interval in seconds (default: %(default)s).",
    )

    for sub in (transcribe, lines, play):
        sub.add_argument(
            "--words-per-line",
            type=int,
            default=WORDS_PER_LINE,
            help="Words per transcript line (default: %(default)s).",
        )

    key = subparsers.add_parser("key", help="Manage the stored Groq API key.")
    key_commands = key.add_subparsers(dest="key_command", required=True)
    key_set = key_commands.add_parser("set", help="Store a new API key.")
    key_set.add_argument("value", help="The API key.")
    key_commands.add_parser("clear", help="Remove the stored API key.")
    key_commands.add_parser("status", help="Show whether an API key is configured.")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "transcribe":
            asyncio.run(_run_transcribe(args))
        elif args.command == "lines":
            _run_lines(args)
        elif args.command == "play":
            asyncio.run(_run_play(args))
        else:
            _run_key(args)
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except (ProviderError, PlaybackError, ValueError) as e:
        # ValueError covers ValidationError and UnsupportedFileError
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
