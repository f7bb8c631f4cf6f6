"""Async HTTP client for the Groq Whisper transcription endpoint.

WHY: The player needs word-level timestamps for an audio file. This
module hides the HTTP details of the provider call (multipart upload,
bearer auth, status handling, response parsing) behind one client class
so callers (CLI, HTTP API, session, tests) only see typed results and
typed errors.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. GroqClient is an async
context manager: enter it to get an authenticated connection pool, exit
to close it. transcribe() uploads the audio with the verbose_json/word
granularity options and returns a TranscriptionResponse.

RULES:
- Always use the async context manager (async with GroqClient(key) as client:)
- The API key is passed in by the caller; the client never reads storage
- A missing key raises MissingCredentialError before any request is sent
- 401 → InvalidCredentialError, other non-2xx → ProviderAPIError
- Transport failures → ProviderNetworkError
- Unparsable 2xx bodies → MalformedResponseError
- No automatic retries
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import httpx

from transcript_player.api.models import TranscriptionResponse
from transcript_player.config import DEFAULT_LANGUAGE, GROQ_BASE_URL, GROQ_MODEL
from transcript_player.errors import (
    InvalidCredentialError,
    MalformedResponseError,
    MissingCredentialError,
    ProviderAPIError,
    ProviderNetworkError,
)

logger = logging.getLogger(__name__)

_TRANSCRIPTIONS_PATH = "/audio/transcriptions"


class GroqClient:
    """Async client for the Groq audio transcription API.

    RULES:
    - Use as: async with GroqClient(api_key) as client: ...
    - base_url defaults to GROQ_BASE_URL from config
    - model defaults to GROQ_MODEL from config
    - transport is an optional httpx transport (used by tests)
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str | None = None,
        model: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self._base_url = (base_url or GROQ_BASE_URL).rstrip("/")
        self._model = model or GROQ_MODEL
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GroqClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=httpx.Timeout(300.0, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "GroqClient must be used as an async context manager: "
                "async with GroqClient(api_key) as client: ..."
            )
        return self._client

    async def transcribe(
        self,
        audio: str | Path | bytes,
        language: str = DEFAULT_LANGUAGE,
        filename: str | None = None,
        on_status: Callable[[str], None] | None = None,
    ) -> TranscriptionResponse:
        """Upload audio and return its word-level transcription.

        Args:
            audio: Path to an audio file, or the raw audio bytes.
            language: ISO 639-1 language hint (e.g. "tr", "en").
            filename: Upload filename; required for bytes, defaults to the
                path's name otherwise.
            on_status: Optional callback for status updates.

        Returns:
            The parsed TranscriptionResponse.
        """
        if not self._api_key:
            raise MissingCredentialError(
                "API key not found. Please set your Groq API key."
            )
        client = self._ensure_client()

        form = {
            "model": self._model,
            "temperature": "0",
            "language": language,
            "response_format": "verbose_json",
            "timestamp_granularities[]": "word",
        }

        if on_status:
            on_status("Uploading audio...")

        try:
            if isinstance(audio, bytes):
                resp = await client.post(
                    _TRANSCRIPTIONS_PATH,
                    data=form,
                    files={"file": (filename or "audio", audio)},
                )
            else:
                audio_path = Path(audio)
                with open(audio_path, "rb") as f:
                    resp = await client.post(
                        _TRANSCRIPTIONS_PATH,
                        data=form,
                        files={"file": (filename or audio_path.name, f)},
                    )
        except httpx.RequestError as exc:
            logger.warning("Transcription request failed: %s", exc)
            raise ProviderNetworkError(
                f"Network error during transcription: {exc}"
            ) from exc

        if on_status:
            on_status("Reading transcription...")

        return _parse_response(resp)


def _parse_response(resp: httpx.Response) -> TranscriptionResponse:
    """Map an HTTP response to a TranscriptionResponse or a typed error."""
    if resp.status_code == 401:
        raise InvalidCredentialError(
            "Invalid API key. Please check your Groq API key.",
            status_code=401,
        )
    if not 200 <= resp.status_code < 300:
        raise ProviderAPIError(
            "Transcription failed: {}".format(_error_detail(resp)),
            status_code=resp.status_code,
        )

    try:
        response = TranscriptionResponse.from_dict(resp.json())
    except (ValueError, KeyError, TypeError) as exc:
        raise MalformedResponseError(
            "Failed to parse response", status_code=resp.status_code
        ) from exc

    logger.info(
        "Transcribed %d words (%.1fs, language=%s)",
        len(response.words), response.duration, response.language or "?",
    )
    return response


def _error_detail(resp: httpx.Response) -> str:
    """Best human-readable description of an error response."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return resp.reason_phrase or str(resp.status_code)
