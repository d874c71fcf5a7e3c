"""State persistence helpers for organizer sessions."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from .errors import MissingStateError, StateError
from .models import EntityStore, FileRecord, FolderRecord, Message, SessionState, Snapshot

DEFAULT_STATE_DIR = Path("~/.chatorg/sessions")
LOG_FILENAME = "chatorg.log"

FILES_KEY = "files"
FOLDERS_KEY = "folders"
MESSAGES_KEY = "messages"
HISTORY_KEY = "history"
CHAT_HEIGHT_KEY = "chat_height"
SELECTED_FOLDER_KEY = "selected_folder"

STATE_KEYS = (
    FILES_KEY,
    FOLDERS_KEY,
    MESSAGES_KEY,
    HISTORY_KEY,
    CHAT_HEIGHT_KEY,
    SELECTED_FOLDER_KEY,
)


class StateRepository:
    """Persist session values as one JSON document per key."""

    def __init__(self, base_dir: Path | str | None = None) -> None:
        """Initialize the repository with an optional base directory.

        Args:
            base_dir: Directory holding one sub-directory per session.
        """
        self._base_dir = Path(base_dir or DEFAULT_STATE_DIR).expanduser()

    @property
    def base_dir(self) -> Path:
        """Return the directory that contains session folders.

        Returns:
            Path: Root directory for persisted sessions.
        """
        return self._base_dir

    def session_dir(self, session: str) -> Path:
        """Return the directory used for a session's keys.

        Args:
            session: Session name.

        Returns:
            Path: Directory holding the session's JSON documents.
        """
        return self._base_dir / session

    def initialize(self, session: str) -> Path:
        """Create the session directory and its log file if missing.

        Args:
            session: Session name.

        Returns:
            Path: Directory containing the state artifacts.
        """
        directory = self.session_dir(session)
        directory.mkdir(parents=True, exist_ok=True)
        (directory / LOG_FILENAME).touch(exist_ok=True)
        return directory

    def load(self, session: str, key: str) -> Any:
        """Load the value persisted under ``key``.

        Args:
            session: Session name.
            key: Logical state key.

        Returns:
            Any: JSON-decoded value.

        Raises:
            MissingStateError: If nothing is stored under the key.
            StateError: If stored data cannot be parsed.
        """
        path = self._key_path(session, key)
        if not path.exists():
            raise MissingStateError(f"No value stored for '{key}' at {path}")

        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StateError(f"Invalid data stored for '{key}': {exc}") from exc

    def save(self, session: str, key: str, value: Any) -> None:
        """Persist a JSON-serializable value under ``key``.

        Args:
            session: Session name.
            key: Logical state key.
            value: JSON-serializable payload.
        """
        self.initialize(session)
        self._key_path(session, key).write_text(
            json.dumps(value, indent=2, ensure_ascii=False), encoding="utf-8"
        )

    def clear(self, session: str, keys: Iterable[str]) -> None:
        """Remove persisted values for the given keys; missing keys are ignored."""
        for key in keys:
            path = self._key_path(session, key)
            if path.exists():
                path.unlink()

    def keys(self, session: str) -> list[str]:
        """Return the keys currently persisted for a session."""
        directory = self.session_dir(session)
        if not directory.exists():
            return []
        return sorted(path.stem for path in directory.glob("*.json"))

    def _key_path(self, session: str, key: str) -> Path:
        return self.session_dir(session) / f"{key}.json"


__all__ = [
    "StateRepository",
    "DEFAULT_STATE_DIR",
    "LOG_FILENAME",
    "STATE_KEYS",
    "FILES_KEY",
    "FOLDERS_KEY",
    "MESSAGES_KEY",
    "HISTORY_KEY",
    "CHAT_HEIGHT_KEY",
    "SELECTED_FOLDER_KEY",
    "EntityStore",
    "FileRecord",
    "FolderRecord",
    "Message",
    "SessionState",
    "Snapshot",
    "StateError",
    "MissingStateError",
]
