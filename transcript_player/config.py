"""Configuration constants, language list, file rules and .env loading.

WHY: Centralizes every configurable value (provider endpoint, model,
default language, line size, accepted audio files) so they are easy to
find and override. Language and format tables are plain data, not buried
in logic.

HOW: python-dotenv loads the .env file on import. Constants are
module-level values that can be overridden through environment variables.
load_api_key() resolves the provider credential through the credential
store and fails with a typed error when it is absent.

RULES:
- SUPPORTED_LANGUAGES is ordered; the first entry is the UI default
- SUPPORTED_AUDIO_FORMATS lists accepted extensions (lowercase, with dot)
- Files larger than MAX_UPLOAD_BYTES are rejected before any upload
- The API key is never hardcoded and never cached here
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from transcript_player.errors import MissingCredentialError, UnsupportedFileError

if TYPE_CHECKING:
    from transcript_player.core.credentials import CredentialStore

load_dotenv()

# ---------------------------------------------------------------------------
# Transcription languages (ISO 639-1 code → label)
# ---------------------------------------------------------------------------

SUPPORTED_LANGUAGES: dict[str, str] = {
    "tr": "Turkish",
    "en": "English",
    "fr": "French",
    "de": "German",
    "es": "Spanish",
    "ru": "Russian",
}


def language_label(code: str) -> str:
    """Return the display label for a language code, or the code itself."""
    return SUPPORTED_LANGUAGES.get(code, code)


# ---------------------------------------------------------------------------
# Accepted audio files
# ---------------------------------------------------------------------------

SUPPORTED_AUDIO_FORMATS: set[str] = {".m4a", ".mp3", ".mp4"}
"""Audio/video file extensions accepted for upload (lowercase, with dot)."""

MAX_UPLOAD_BYTES = 25 * 1024 * 1024
"""Largest file the provider accepts on its free tier."""


def validate_audio_file(path: str | Path) -> Path:
    """Check that a selected file can be sent to the provider.

    WHY: Rejecting a bad file locally gives an immediate, clear message
    instead of a slow upload followed by a cryptic 4xx.

    RULES:
    - Raises UnsupportedFileError when the file is missing, has an
      unsupported extension, or exceeds MAX_UPLOAD_BYTES
    - Returns the path as a Path on success
    """
    path = Path(path)
    if not path.is_file():
        raise UnsupportedFileError(f"File not found: {path}")

    ext = path.suffix.lower()
    if ext not in SUPPORTED_AUDIO_FORMATS:
        raise UnsupportedFileError(
            "Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_AUDIO_FORMATS))
            )
        )

    size = path.stat().st_size
    if size > MAX_UPLOAD_BYTES:
        raise UnsupportedFileError(
            f"File is too large ({size:,} bytes, limit {MAX_UPLOAD_BYTES:,} bytes)"
        )
    return path


# ---------------------------------------------------------------------------
# Provider and display defaults
# ---------------------------------------------------------------------------

GROQ_BASE_URL = os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
GROQ_MODEL = os.getenv("GROQ_MODEL", "whisper-large-v3-turbo")
DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "tr")
WORDS_PER_LINE = int(os.getenv("WORDS_PER_LINE", "10"))
CREDENTIAL_ENV_VAR = "GROQ_API_KEY"
CREDENTIAL_FILE = Path(os.getenv("CREDENTIAL_FILE", ".env"))


def load_api_key(store: CredentialStore | None = None) -> str:
    """Load the provider API key from the credential store.

    WHY: Every provider call needs the key, but the call path must receive
    it as a parameter. This is the single place that resolves it.

    HOW: Reads through a CredentialStore (the default store when none is
    given), which checks the environment first and the .env file second.

    RULES:
    - Raises MissingCredentialError if the key is missing or blank
    - Never returns a default/placeholder value
    """
    if store is None:
        from transcript_player.core.credentials import CredentialStore

        store = CredentialStore()

    key = store.get()
    if not key:
        raise MissingCredentialError(
            "API key not found. Please set your Groq API key "
            "(transcript-player key set <KEY>)."
        )
    return key
