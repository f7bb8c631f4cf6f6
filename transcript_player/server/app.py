"""FastAPI application exposing transcription, segmentation and lookup.

WHY: A browser or any other HTTP client can drive the player without
holding provider logic itself: upload an audio file to get word
timestamps and display lines, re-segment words with a different line
size, or ask which line is active at a given time.

HOW: One FastAPI app with five endpoints. POST /transcriptions validates
the upload, resolves the API key (request header first, credential store
second) and passes it explicitly to GroqClient. Core errors are translated
to HTTP errors at this edge only.

RULES:
- All endpoints have OpenAPI descriptions and a consistent ErrorResponse
- Unsupported/oversized uploads → 400
- Missing or rejected API key → 401
- Provider network/upstream/malformed failures → 502
- Segmentation contract violations → 422
- The provider is never retried
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, List, Optional

from fastapi import FastAPI, File, Form, Header, HTTPException, UploadFile

from transcript_player import __version__
from transcript_player.api.client import GroqClient
from transcript_player.api.models import TranscriptionResponse
from transcript_player.config import (
    DEFAULT_LANGUAGE,
    MAX_UPLOAD_BYTES,
    SUPPORTED_AUDIO_FORMATS,
    SUPPORTED_LANGUAGES,
    WORDS_PER_LINE,
    load_api_key,
)
from transcript_player.core.credentials import CredentialStore
from transcript_player.core.locator import find_active_line
from transcript_player.core.segmenter import check_words_per_line, split_into_lines
from transcript_player.errors import (
    InvalidCredentialError,
    MissingCredentialError,
    ProviderError,
    ValidationError,
)
from transcript_player.server.models import (
    ActiveLineRequest,
    ActiveLineResponse,
    ErrorResponse,
    HealthResponse,
    LanguageInfo,
    LineModel,
    LinesRequest,
    LinesResponse,
    TranscriptionResult,
    WordModel,
)

logger = logging.getLogger(__name__)

credential_store = CredentialStore()

app = FastAPI(
    title="Transcript Player API",
    description=(
        "Transcribe audio with word-level timestamps, group the words into "
        "display lines, and look up the line active at a playback time."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _validate_upload(filename: str, size: int) -> None:
    """Raise HTTPException if the upload cannot be sent to the provider."""
    ext = Path(filename).suffix.lower()
    if ext not in SUPPORTED_AUDIO_FORMATS:
        raise HTTPException(
            status_code=400,
            detail="Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_AUDIO_FORMATS))
            ),
        )
    if size > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=400,
            detail="File is too large ({:,} bytes, limit {:,} bytes)".format(
                size, MAX_UPLOAD_BYTES
            ),
        )


async def _transcribe_upload(
    content: bytes,
    filename: str,
    language: str,
    api_key: str,
) -> TranscriptionResponse:
    """Send one uploaded file to the provider."""
    async with GroqClient(api_key) as client:
        return await client.transcribe(content, language=language, filename=filename)


def _provider_http_error(exc: ProviderError) -> HTTPException:
    if isinstance(exc, (MissingCredentialError, InvalidCredentialError)):
        return HTTPException(status_code=401, detail=exc.message)
    return HTTPException(status_code=502, detail=exc.message)


# ---------------------------------------------------------------------------
# Endpoints: Transcriptions
# ---------------------------------------------------------------------------


@app.post(
    "/transcriptions",
    response_model=TranscriptionResult,
    tags=["transcriptions"],
    summary="Transcribe an audio file",
    description=(
        "Upload an audio file and receive word-level timestamps plus the "
        "words grouped into display lines. The request waits for the provider."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Unsupported or oversized file"},
        401: {"model": ErrorResponse, "description": "API key missing or rejected"},
        422: {"model": ErrorResponse, "description": "Invalid words_per_line"},
        502: {"model": ErrorResponse, "description": "Provider failure"},
    },
)
async def create_transcription(
    file: Annotated[
        UploadFile,
        File(description="Audio file to transcribe (.m4a, .mp3 or .mp4)."),
    ],
    language: Annotated[
        str,
        Form(description="Transcription language ISO 639-1 code."),
    ] = DEFAULT_LANGUAGE,
    words_per_line: Annotated[
        int,
        Form(description="Words per display line."),
    ] = WORDS_PER_LINE,
    x_groq_api_key: Annotated[
        Optional[str],
        Header(description="Groq API key; overrides the key stored on the server."),
    ] = None,
) -> TranscriptionResult:
    # Sanitize filename to prevent path traversal
    filename = Path(file.filename or "upload").name
    content = await file.read()
    _validate_upload(filename, len(content))

    try:
        check_words_per_line(words_per_line)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    try:
        api_key = x_groq_api_key or load_api_key(credential_store)
        response = await _transcribe_upload(content, filename, language, api_key)
    except ProviderError as exc:
        logger.warning("Transcription of %s failed: %s", filename, exc)
        raise _provider_http_error(exc)

    try:
        lines = split_into_lines(response.words, words_per_line)
    except ValidationError as exc:
        # Well-formed provider output never gets here
        raise HTTPException(status_code=502, detail="Provider returned invalid timestamps: {}".format(exc))

    return TranscriptionResult(
        text=response.text,
        language=response.language,
        duration=response.duration,
        words=[WordModel.from_word(w) for w in response.words],
        lines=[LineModel.from_line(line) for line in lines],
        request_id=response.request_id,
    )


# ---------------------------------------------------------------------------
# Endpoints: Lines
# ---------------------------------------------------------------------------


@app.post(
    "/lines",
    response_model=LinesResponse,
    tags=["lines"],
    summary="Group words into display lines",
    responses={
        422: {"model": ErrorResponse, "description": "Invalid words_per_line or timestamps"},
    },
)
async def create_lines(request: LinesRequest) -> LinesResponse:
    try:
        lines = split_into_lines(
            [w.to_word() for w in request.words], request.words_per_line
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return LinesResponse(lines=[LineModel.from_line(line) for line in lines])


@app.post(
    "/lines/active",
    response_model=ActiveLineResponse,
    tags=["lines"],
    summary="Find the line active at a playback time",
    description=(
        "Returns the index of the first line whose [start, end) interval "
        "contains current_time, or null."
    ),
)
async def locate_active_line(request: ActiveLineRequest) -> ActiveLineResponse:
    index = find_active_line(
        request.current_time, [line.to_line() for line in request.lines]
    )
    return ActiveLineResponse(index=index)


# ---------------------------------------------------------------------------
# Endpoints: Languages and health
# ---------------------------------------------------------------------------


@app.get(
    "/languages",
    response_model=List[LanguageInfo],
    tags=["languages"],
    summary="List transcription languages",
)
async def list_languages() -> List[LanguageInfo]:
    return [
        LanguageInfo(code=code, label=label)
        for code, label in SUPPORTED_LANGUAGES.items()
    ]


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        credential_configured=credential_store.has_credential,
    )


def run_api():
    """Entry point for the transcript-player-api console script."""
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)
