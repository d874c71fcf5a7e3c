"""Session service that runs commands one at a time and persists the results."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional

from pydantic import TypeAdapter, ValidationError

from chatorg.config import ChatorgConfig
from chatorg.organization import ActionExecutor, CommandParser, HistoryManager, Intent
from chatorg.organization.executor import ERROR_MESSAGE
from chatorg.state import (
    CHAT_HEIGHT_KEY,
    FILES_KEY,
    FOLDERS_KEY,
    HISTORY_KEY,
    MESSAGES_KEY,
    SELECTED_FOLDER_KEY,
    STATE_KEYS,
    MissingStateError,
    StateError,
    StateRepository,
)
from chatorg.state.defaults import MAX_CHAT_HEIGHT, MIN_CHAT_HEIGHT, default_session
from chatorg.state.models import (
    EntityStore,
    FileRecord,
    FolderRecord,
    Message,
    SessionState,
    Snapshot,
)

LOGGER = logging.getLogger(__name__)

_FILES = TypeAdapter(list[FileRecord])
_FOLDERS = TypeAdapter(list[FolderRecord])
_MESSAGES = TypeAdapter(list[Message])
_HISTORY = TypeAdapter(list[Snapshot])

# Reset wipes every key except the layout metric.
RESET_KEYS = tuple(key for key in STATE_KEYS if key != CHAT_HEIGHT_KEY)


@dataclass(slots=True)
class CommandOutcome:
    """Result of one submitted command.

    Attributes:
        command: Text submitted by the user.
        intent: Intent the parser produced, or None when parsing failed.
        message: Reply appended to the transcript.
        mutated: Whether the entity store changed.
        reset: Whether the session was restored to defaults.
        selected_folder: Folder selection after the command.
    """

    command: str
    intent: Optional[Intent]
    message: str
    mutated: bool = False
    reset: bool = False
    selected_folder: Optional[str] = None

    @property
    def json_payload(self) -> dict[str, Any]:
        return {
            "command": self.command,
            "action": self.intent.action if self.intent is not None else None,
            "message": self.message,
            "mutated": self.mutated,
            "reset": self.reset,
            "selected_folder": self.selected_folder,
        }


@dataclass(slots=True)
class FolderView:
    """What a renderer shows for the current selection."""

    folder: Optional[FolderRecord]
    subfolders: list[FolderRecord]
    files: list[FileRecord]


class OrganizerSession:
    """Own the live store for one persisted session.

    Commands are processed to completion one at a time; input arriving while
    a command is in flight is rejected.
    """

    def __init__(
        self,
        config: ChatorgConfig,
        *,
        repository: StateRepository | None = None,
        session_name: str | None = None,
        parser: CommandParser | None = None,
        executor: ActionExecutor | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the session.

        Args:
            config: Loaded chatorg configuration.
            repository: Persistence collaborator; defaults to the configured state dir.
            session_name: Session to load; defaults to `session.name` from config.
            parser: Command parser override.
            executor: Action executor override.
            sleep: Function used for the fixed response delay.
        """
        self._config = config
        self._repository = repository or StateRepository(config.session.state_dir)
        self._name = session_name or config.session.name
        self._parser = parser or CommandParser()
        self._executor = executor or ActionExecutor(colors=config.engine.folder_colors)
        self._sleep = sleep
        self._delay_seconds = config.engine.response_delay_ms / 1000
        self._lock = threading.Lock()
        self._loaded = False
        self._persisted: dict[str, Any] = {}

        self._store = EntityStore()
        self._history = HistoryManager(limit=config.engine.history_limit)
        self._messages: list[Message] = []
        self._chat_height = 0
        self._selected_folder: Optional[str] = None
        self._apply(default_session())

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    @property
    def name(self) -> str:
        return self._name

    @property
    def repository(self) -> StateRepository:
        return self._repository

    @property
    def is_processing(self) -> bool:
        """Return True while a command is in flight."""
        return self._lock.locked()

    @property
    def store(self) -> EntityStore:
        return self._store

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    @property
    def chat_height(self) -> int:
        return self._chat_height

    @property
    def selected_folder(self) -> Optional[str]:
        return self._selected_folder

    @property
    def state(self) -> SessionState:
        """Return a copy of everything this session persists."""
        return SessionState(
            store=self._store.clone(),
            messages=list(self._messages),
            history=self._history.snapshots,
            chat_height=self._chat_height,
            selected_folder=self._selected_folder,
        )

    def load(self) -> "OrganizerSession":
        """Read persisted keys, substituting defaults for absent or unparsable ones.

        Returns:
            OrganizerSession: The session, for chaining.
        """
        defaults = default_session()
        files = self._load_key(FILES_KEY, _FILES.validate_python)
        folders = self._load_key(FOLDERS_KEY, _FOLDERS.validate_python)
        messages = self._load_key(MESSAGES_KEY, _MESSAGES.validate_python)
        history = self._load_key(HISTORY_KEY, _HISTORY.validate_python)
        chat_height = self._load_key(CHAT_HEIGHT_KEY, int)
        selected = self._load_key(SELECTED_FOLDER_KEY, _optional_str)

        self._apply(
            SessionState(
                store=EntityStore(
                    files=files if files is not None else defaults.store.files,
                    folders=folders if folders is not None else defaults.store.folders,
                ),
                messages=messages if messages is not None else defaults.messages,
                history=history if history is not None else defaults.history,
                chat_height=(
                    _clamp_height(chat_height) if chat_height is not None else defaults.chat_height
                ),
                selected_folder=selected,
            )
        )
        self._loaded = True
        LOGGER.debug(
            "Loaded session %s: %d file(s), %d folder(s), %d snapshot(s)",
            self._name,
            len(self._store.files),
            len(self._store.folders),
            len(self._history),
        )
        return self

    def submit(self, text: str) -> Optional[CommandOutcome]:
        """Process one command end to end.

        Args:
            text: Raw command text.

        Returns:
            Optional[CommandOutcome]: Outcome of the command, or None when the
            input was blank or another command is still being processed.
        """
        command = text.strip()
        if not command:
            return None
        if not self._lock.acquire(blocking=False):
            LOGGER.info("Rejected %r: a command is already being processed", command)
            return None

        try:
            if not self._loaded:
                self.load()
            self._append_message(command, "user")
            self._save_changed()

            self._sleep(self._delay_seconds)
            outcome = self._run(command)

            self._append_message(outcome.message, "ai")
            self._save_changed()
            return outcome
        finally:
            self._lock.release()

    def set_chat_height(self, height: int) -> int:
        """Update the layout metric, clamped to the supported range.

        Args:
            height: Requested transcript panel height.

        Returns:
            int: Height actually stored.
        """
        with self._lock:
            if not self._loaded:
                self.load()
            self._chat_height = _clamp_height(height)
            self._save_changed()
            return self._chat_height

    def current_view(self) -> FolderView:
        """Return the selected folder's contents, or the unorganized files."""
        folder = self._store.folder_by_id(self._selected_folder)
        if self._selected_folder is None:
            return FolderView(folder=None, subfolders=[], files=self._store.unorganized_files())
        return FolderView(
            folder=folder,
            subfolders=self._store.subfolders(self._selected_folder),
            files=self._store.files_in(self._selected_folder),
        )

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _apply(self, state: SessionState) -> None:
        self._store = state.store
        self._messages = list(state.messages)
        self._history = HistoryManager(state.history, limit=self._config.engine.history_limit)
        self._chat_height = state.chat_height
        self._selected_folder = state.selected_folder

    def _run(self, command: str) -> CommandOutcome:
        try:
            intent = self._parser.parse(command, self._store)
        except Exception:
            LOGGER.exception("Failed to parse command %r", command)
            return CommandOutcome(
                command=command,
                intent=None,
                message=ERROR_MESSAGE,
                selected_folder=self._selected_folder,
            )

        result = self._executor.execute(
            intent, self._store, self._history, self._selected_folder
        )
        self._store = result.store
        self._history = result.history
        self._selected_folder = result.selected_folder

        if result.reset:
            self._repository.clear(self._name, RESET_KEYS)
            for key in RESET_KEYS:
                self._persisted.pop(key, None)
            self._messages = default_session().messages
            LOGGER.info("Session %s reset to defaults", self._name)

        return CommandOutcome(
            command=command,
            intent=intent,
            message=result.message,
            mutated=result.mutated,
            reset=result.reset,
            selected_folder=result.selected_folder,
        )

    def _append_message(self, text: str, sender: Literal["user", "ai"]) -> None:
        next_id = max((message.id for message in self._messages), default=0) + 1
        self._messages.append(Message(id=next_id, text=text, sender=sender))

    def _serialized(self) -> dict[str, Any]:
        return {
            FILES_KEY: _FILES.dump_python(self._store.files, mode="json"),
            FOLDERS_KEY: _FOLDERS.dump_python(self._store.folders, mode="json"),
            MESSAGES_KEY: _MESSAGES.dump_python(self._messages, mode="json"),
            HISTORY_KEY: _HISTORY.dump_python(self._history.snapshots, mode="json"),
            CHAT_HEIGHT_KEY: self._chat_height,
            SELECTED_FOLDER_KEY: self._selected_folder,
        }

    def _save_changed(self) -> None:
        """Persist every key whose value differs from what was last stored."""
        for key, value in self._serialized().items():
            if key in self._persisted and self._persisted[key] == value:
                continue
            self._repository.save(self._name, key, value)
            self._persisted[key] = value

    def _load_key(self, key: str, convert: Callable[[Any], Any]) -> Any:
        try:
            raw = self._repository.load(self._name, key)
        except MissingStateError:
            return None
        except StateError as exc:
            LOGGER.warning("Ignoring unreadable %s state: %s", key, exc)
            return None

        try:
            value = convert(raw)
        except (ValidationError, TypeError, ValueError) as exc:
            LOGGER.warning("Ignoring invalid %s state: %s", key, exc)
            return None

        self._persisted[key] = raw
        return value


def _clamp_height(height: int) -> int:
    return max(MIN_CHAT_HEIGHT, min(MAX_CHAT_HEIGHT, height))


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "null":
        return None
    if not isinstance(value, str):
        raise TypeError(f"Expected a folder id string, got {type(value).__name__}")
    return value


__all__ = ["OrganizerSession", "CommandOutcome", "FolderView", "RESET_KEYS"]
