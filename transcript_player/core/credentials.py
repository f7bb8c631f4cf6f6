"""Persistent storage for the transcription provider's API key.

WHY: The user enters the key once and expects it to survive restarts.
The key is configuration, so the provider call path receives it as a
parameter; this store is only the place it is read from and written to.

HOW: The key lives in a .env-style file managed with python-dotenv's
get_key/set_key/unset_key helpers (the same file load_dotenv() reads on
startup). An environment variable with the same name takes precedence
on read, and writes are mirrored into os.environ for the current process.

RULES:
- Single value, no expiry, no validation beyond presence
- Blank values are treated as absent
- Reading never creates the file; writing creates it when needed
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import get_key, set_key, unset_key

from transcript_player.config import CREDENTIAL_ENV_VAR, CREDENTIAL_FILE

logger = logging.getLogger(__name__)


class CredentialStore:
    """Read/write access to the stored API key."""

    def __init__(
        self,
        path: str | Path | None = None,
        key_name: str = CREDENTIAL_ENV_VAR,
        use_environment: bool = True,
    ) -> None:
        self._path = Path(path) if path is not None else CREDENTIAL_FILE
        self._key_name = key_name
        self._use_environment = use_environment

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> str | None:
        """Return the stored key, or None when none is configured."""
        if self._use_environment:
            value = os.environ.get(self._key_name, "").strip()
            if value:
                return value

        if not self._path.is_file():
            return None
        value = (get_key(self._path, self._key_name) or "").strip()
        return value or None

    def set(self, value: str) -> None:
        """Persist a new key, replacing any previous one.

        RULES:
        - Raises ValueError for a blank value (use clear() instead)
        """
        value = value.strip()
        if not value:
            raise ValueError("API key must not be empty")

        self._path.touch(exist_ok=True)
        set_key(self._path, self._key_name, value)
        if self._use_environment:
            os.environ[self._key_name] = value
        logger.info("Stored API key in %s", self._path)

    def clear(self) -> None:
        """Remove the stored key from the file and the current process."""
        if self._path.is_file() and get_key(self._path, self._key_name) is not None:
            unset_key(self._path, self._key_name)
        if self._use_environment:
            os.environ.pop(self._key_name, None)
        logger.info("Cleared API key from %s", self._path)

    @property
    def has_credential(self) -> bool:
        return self.get() is not None
