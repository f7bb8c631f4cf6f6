"""Exception taxonomy shared by every layer of the player.

WHY: Three very different kinds of failure reach the presentation layer:
caller bugs (bad segment size, malformed timestamps), provider failures
(credential, network, upstream response) and playback failures (the media
resource cannot play the loaded source). Callers need to tell them apart
to pick the right message and the right known-good state to return to.

HOW: Three root classes. ValidationError derives from ValueError so that
generic ``except ValueError`` handlers (as in the CLI) still catch it.
Provider failures get one subclass per failure mode the client can detect.

RULES:
- ValidationError: fails fast, never recovered inside the core
- ProviderError: reported to the user, never retried automatically
- PlaybackError: terminal for the current load, never retried
"""

from __future__ import annotations


class ValidationError(ValueError):
    """Raised when a caller violates an input contract."""


class UnsupportedFileError(ValidationError):
    """Raised when a selected file cannot be sent to the provider.

    RULES:
    - Missing files, unsupported extensions and oversized files all land here
    """


class ProviderError(Exception):
    """Base class for transcription provider failures.

    WHY: The presentation layer shows one message for any provider failure
    but may still branch on the subclass (e.g. prompt for a new API key).

    RULES:
    - status_code is the HTTP status when one was received, else None
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class MissingCredentialError(ProviderError):
    """No API key is configured."""


class InvalidCredentialError(ProviderError):
    """The provider rejected the API key (HTTP 401)."""


class ProviderNetworkError(ProviderError):
    """The request never produced an HTTP response."""


class ProviderAPIError(ProviderError):
    """The provider answered with a non-2xx status other than 401."""


class MalformedResponseError(ProviderError):
    """The provider answered 2xx but the body could not be parsed."""


class PlaybackError(Exception):
    """Raised (or reported) when the media resource cannot play a source.

    RULES:
    - reason is the resource's own description of the failure
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Playback failed: {reason}")


class TranscriptionInProgressError(RuntimeError):
    """Raised when a second transcription is requested while one is pending."""
