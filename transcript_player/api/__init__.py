"""Transcription provider package — async HTTP interface to Groq Whisper.

WHY: The player needs a flat list of timestamped words for an audio file.
This package encapsulates all provider communication behind one client.

HOW: GroqClient (httpx.AsyncClient) uploads the audio and parses the
verbose_json response into a TranscriptionResponse (models.py).

RULES:
- All provider HTTP calls go through GroqClient
- The API key is always passed in explicitly
"""

from transcript_player.api.client import GroqClient
from transcript_player.api.models import (
    TranscriptionResponse,
    load_transcript,
    save_transcript,
)

__all__ = ["GroqClient", "TranscriptionResponse", "load_transcript", "save_transcript"]
