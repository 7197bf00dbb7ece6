"""
Session storage for the auth token and the cached user profile.

The identity resolver and API client take a ``SessionStore`` instead of
reading ambient globals, so tests can hand them an in-memory store.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from homehub.schemas.customer_schema import UserProfile

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Persistent credential + profile cache for a single client session."""

    def get_token(self) -> Optional[str]: ...

    def set_token(self, token: str) -> None: ...

    def clear_token(self) -> None: ...

    def get_profile(self) -> Optional[UserProfile]: ...

    def set_profile(self, profile: UserProfile) -> None: ...

    def clear(self) -> None: ...


class InMemorySessionStore:
    """Process-local store; state is lost when the process exits."""

    def __init__(self, token: Optional[str] = None, profile: Optional[UserProfile] = None) -> None:
        self._token = token
        self._profile = profile

    def get_token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token

    def clear_token(self) -> None:
        self._token = None

    def get_profile(self) -> Optional[UserProfile]:
        return self._profile

    def set_profile(self, profile: UserProfile) -> None:
        self._profile = profile

    def clear(self) -> None:
        self._token = None
        self._profile = None


class FileSessionStore:
    """
    JSON-file backed store so a login survives between CLI invocations.

    File layout: ``{"token": "...", "user": {...profile...}}``.
    A corrupt or unreadable file is treated as an empty session.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get_token(self) -> Optional[str]:
        return self._read().get("token") or None

    def set_token(self, token: str) -> None:
        data = self._read()
        data["token"] = token
        self._write(data)

    def clear_token(self) -> None:
        data = self._read()
        data.pop("token", None)
        self._write(data)

    def get_profile(self) -> Optional[UserProfile]:
        raw = self._read().get("user")
        if not isinstance(raw, dict):
            return None
        try:
            return UserProfile.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Ignoring invalid cached profile in %s: %s", self.path, exc)
            return None

    def set_profile(self, profile: UserProfile) -> None:
        data = self._read()
        data["user"] = profile.model_dump(mode="json", exclude_none=True)
        self._write(data)

    def clear(self) -> None:
        self._write({})


def open_session_store(session_file: str) -> SessionStore:
    """Pick the file store when a path is configured, else in-memory."""
    if session_file:
        return FileSessionStore(Path(session_file))
    return InMemorySessionStore()
