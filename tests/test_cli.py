"""Tests for the command-line interface.

WHY: The CLI is the main way to use the player without a GUI. Its
subcommands chain validation, credential lookup, the provider client,
segmentation and the playback controller, and its exit codes are what
scripts rely on.

HOW: main() is called with an explicit argv. Output is captured with
capsys. The provider client is replaced with a stub via monkeypatch, and
the working directory is moved to tmp_path so the default .env file is
isolated.

RULES:
- The real provider is never called
- Errors must exit with status 1 and print "Error: ..." to stderr
"""

from __future__ import annotations

import json

import pytest

from transcript_player import cli
from transcript_player.api.models import TranscriptionResponse
from transcript_player.cli import (
    _resolve_output_path,
    build_parser,
    format_line,
    format_timestamp,
    main,
)
from transcript_player.core.ir import TranscriptLine
from transcript_player.errors import ProviderAPIError


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def transcript_file(tmp_path, sample_response):
    path = tmp_path / "talk-transcript.json"
    path.write_text(json.dumps(sample_response), encoding="utf-8")
    return path


class StubGroqClient:
    """Async context manager with the GroqClient.transcribe signature."""

    instances = []

    def __init__(self, api_key, result=None, error=None):
        self.api_key = api_key
        self.result = result
        self.error = error
        self.calls = []
        StubGroqClient.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    async def transcribe(self, audio, language="tr", filename=None, on_status=None):
        self.calls.append((audio, language))
        if on_status:
            on_status("Uploading audio...")
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def stub_client(monkeypatch, sample_response):
    StubGroqClient.instances = []
    result = TranscriptionResponse.from_dict(sample_response)
    monkeypatch.setattr(cli, "GroqClient", lambda key: StubGroqClient(key, result=result))
    return StubGroqClient


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


class TestFormatting:

    @pytest.mark.parametrize("seconds, expected", [
        (0, "0:00"),
        (5.9, "0:05"),
        (65.2, "1:05"),
        (600, "10:00"),
        (-3, "0:00"),
    ])
    def test_format_timestamp(self, seconds, expected):
        assert format_timestamp(seconds) == expected

    def test_format_line(self):
        line = TranscriptLine(text="hello there", start=61.0, end=64.5, word_range=(0, 1))
        assert format_line(line) == "[1:01 - 1:04] hello there"


class TestResolveOutputPath:

    def test_no_conflict(self, tmp_path):
        assert _resolve_output_path("talk", tmp_path) == tmp_path / "talk-transcript.json"

    def test_numeric_suffix_on_conflict(self, tmp_path):
        (tmp_path / "talk-transcript.json").write_text("{}")
        assert _resolve_output_path("talk", tmp_path) == tmp_path / "talk-transcript-2.json"
        (tmp_path / "talk-transcript-2.json").write_text("{}")
        assert _resolve_output_path("talk", tmp_path) == tmp_path / "talk-transcript-3.json"


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class TestParser:

    def test_transcribe_defaults(self):
        args = build_parser().parse_args(["transcribe", "talk.mp3"])
        assert args.language == "tr"
        assert args.words_per_line == 10
        assert args.output is None

    def test_unknown_language_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["transcribe", "talk.mp3", "--language", "xx"])

    def test_play_options(self):
        args = build_parser().parse_args(["play", "t.json", "--start", "12.5", "--tick", "0.1"])
        assert args.start == 12.5
        assert args.tick == 0.1

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


class TestLinesCommand:

    def test_prints_lines(self, transcript_file, capsys):
        main(["lines", str(transcript_file), "--words-per-line", "5"])
        out = capsys.readouterr().out.splitlines()
        assert out == [
            "[0:00 - 0:02] How are you doing today?",
            "[0:02 - 0:03] I am fantastic, thank you.",
        ]

    def test_malformed_file_exits_1(self, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text("{not json")
        with pytest.raises(SystemExit) as exc_info:
            main(["lines", str(bad)])
        assert exc_info.value.code == 1
        assert "Error: Failed to parse transcript file bad.json" in capsys.readouterr().err

    def test_zero_words_per_line_exits_1(self, transcript_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["lines", str(transcript_file), "--words-per-line", "0"])
        assert exc_info.value.code == 1
        assert "words_per_line must be a positive integer" in capsys.readouterr().err


class TestTranscribeCommand:

    @pytest.fixture
    def audio_file(self, tmp_path):
        path = tmp_path / "talk.mp3"
        path.write_bytes(b"ID3 fake")
        return path

    def test_saves_and_prints(self, audio_file, stub_client, monkeypatch, capsys):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_test")
        main(["transcribe", str(audio_file), "--language", "en", "--words-per-line", "5"])

        captured = capsys.readouterr()
        saved = audio_file.parent / "talk-transcript.json"
        assert saved.exists()
        assert json.loads(saved.read_text(encoding="utf-8"))["words"][0]["word"] == "How"
        assert captured.out.splitlines()[0] == "[0:00 - 0:02] How are you doing today?"
        assert "Saved:" in captured.err

        client = stub_client.instances[0]
        assert client.api_key == "gsk_test"
        assert client.calls == [(audio_file.resolve(), "en")]

    def test_explicit_output(self, audio_file, stub_client, monkeypatch, tmp_path):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_test")
        target = tmp_path / "out.json"
        main(["transcribe", str(audio_file), "--output", str(target)])
        assert target.exists()

    def test_missing_key_exits_before_upload(self, audio_file, stub_client, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["transcribe", str(audio_file)])
        assert exc_info.value.code == 1
        assert "API key not found" in capsys.readouterr().err
        assert stub_client.instances == []

    @pytest.mark.parametrize("size", ["0", "-2"])
    def test_bad_words_per_line_exits_before_upload(self, audio_file, stub_client, monkeypatch, capsys, size):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_test")
        with pytest.raises(SystemExit) as exc_info:
            main(["transcribe", str(audio_file), "--words-per-line", size])
        assert exc_info.value.code == 1
        assert "words_per_line must be a positive integer" in capsys.readouterr().err
        assert stub_client.instances == []
        assert not (audio_file.parent / "talk-transcript.json").exists()

    def test_unsupported_file_exits_1(self, tmp_path, stub_client, monkeypatch, capsys):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_test")
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")
        with pytest.raises(SystemExit) as exc_info:
            main(["transcribe", str(notes)])
        assert exc_info.value.code == 1
        assert "Unsupported file type '.txt'" in capsys.readouterr().err

    def test_missing_file_exits_1(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_test")
        with pytest.raises(SystemExit) as exc_info:
            main(["transcribe", str(tmp_path / "nope.mp3")])
        assert exc_info.value.code == 1
        assert "File not found" in capsys.readouterr().err

    def test_provider_error_exits_1(self, audio_file, monkeypatch, capsys):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_test")
        error = ProviderAPIError("Transcription failed: model overloaded", 500)
        monkeypatch.setattr(cli, "GroqClient", lambda key: StubGroqClient(key, error=error))
        with pytest.raises(SystemExit) as exc_info:
            main(["transcribe", str(audio_file)])
        assert exc_info.value.code == 1
        assert "Error: Transcription failed: model overloaded" in capsys.readouterr().err
        assert not (audio_file.parent / "talk-transcript.json").exists()


class TestPlayCommand:

    @pytest.fixture
    def short_transcript(self, tmp_path):
        data = {
            "text": "one two three",
            "duration": 0.06,
            "words": [
                {"word": "one", "start": 0.0, "end": 0.02},
                {"word": "two", "start": 0.02, "end": 0.04},
                {"word": "three", "start": 0.04, "end": 0.06},
            ],
        }
        path = tmp_path / "short.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def test_plays_to_end(self, short_transcript, capsys):
        main(["play", str(short_transcript), "--words-per-line", "1", "--tick", "0.005"])
        captured = capsys.readouterr()
        out = captured.out.splitlines()
        assert out[0] == "[0:00 - 0:00] one"
        assert set(out) <= {"[0:00 - 0:00] one", "[0:00 - 0:00] two", "[0:00 - 0:00] three"}
        assert "Done." in captured.err

    def test_start_offset(self, short_transcript, capsys):
        main([
            "play", str(short_transcript),
            "--words-per-line", "1", "--tick", "0.005", "--start", "0.045",
        ])
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "[0:00 - 0:00] one"
        assert out[1] == "[0:00 - 0:00] three"


class TestKeyCommand:

    def test_set_status_clear(self, tmp_path, capsys):
        main(["key", "status"])
        assert capsys.readouterr().out.strip() == "not configured"

        main(["key", "set", "gsk_cli"])
        assert "GROQ_API_KEY" in (tmp_path / ".env").read_text()

        main(["key", "status"])
        assert capsys.readouterr().out.strip() == "configured"

        main(["key", "clear"])
        main(["key", "status"])
        assert capsys.readouterr().out.strip() == "not configured"

    def test_set_blank_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["key", "set", "  "])
        assert exc_info.value.code == 1
        assert "must not be empty" in capsys.readouterr().err
