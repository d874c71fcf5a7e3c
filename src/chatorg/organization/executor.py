"""Executor that applies parsed intents to the entity store."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from chatorg.config.models import DEFAULT_FOLDER_COLORS
from chatorg.state.defaults import default_store
from chatorg.state.models import EntityStore, FolderRecord

from .history import HistoryManager
from .models import (
    CreateNestedFolderIntent,
    CreateSimpleFolderIntent,
    DeleteFolderIntent,
    InfoIntent,
    Intent,
    ListIntent,
    MoveAllByExtensionIntent,
    MoveFileIntent,
    OpenFolderIntent,
    RenameFolderIntent,
    ResetIntent,
    TargetFolder,
    UndoIntent,
)
from .planner import slugify

LOGGER = logging.getLogger(__name__)

NOTHING_TO_UNDO_MESSAGE = "Nothing to undo! You haven't made any changes yet."
UNDO_MESSAGE = "✅ Undone! Restored to previous state."
RESET_MESSAGE = "✅ All files and folders have been reset to default!"
ERROR_MESSAGE = "❌ An error occurred while processing your command."


def _milliseconds() -> int:
    return time.time_ns() // 1_000_000


@dataclass(slots=True)
class ExecutionResult:
    """Outcome of executing one intent.

    Attributes:
        intent: Intent that was executed.
        store: Entity store after execution.
        history: Undo history after execution.
        message: Reply shown to the user.
        selected_folder: Folder selection after execution.
        mutated: Whether the store changed and a snapshot was recorded.
        reset: Whether the session was restored to defaults.
    """

    intent: Intent
    store: EntityStore
    history: HistoryManager
    message: str
    selected_folder: Optional[str] = None
    mutated: bool = False
    reset: bool = False


class ActionExecutor:
    """Apply intents, owning folder creation and cascading delete policy."""

    def __init__(
        self,
        *,
        colors: Sequence[str] | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], int] = _milliseconds,
    ) -> None:
        """Initialize the executor.

        Args:
            colors: Palette used for new folders.
            rng: Random source for color choice.
            clock: Millisecond clock used to suffix generated folder ids.
        """
        self._colors = list(colors or DEFAULT_FOLDER_COLORS)
        if not self._colors:
            raise ValueError("At least one folder color is required.")
        self._rng = rng or random.Random()
        self._clock = clock

    def execute(
        self,
        intent: Intent,
        store: EntityStore,
        history: HistoryManager,
        selected_folder: Optional[str] = None,
    ) -> ExecutionResult:
        """Apply ``intent`` without modifying the inputs.

        Args:
            intent: Parsed intent.
            store: Current entity store.
            history: Current undo history.
            selected_folder: Currently opened folder id, if any.

        Returns:
            ExecutionResult: New store, history, selection and reply. Unexpected
            failures are reported in the reply with the inputs left untouched.
        """
        try:
            return self._dispatch(intent, store, history, selected_folder)
        except Exception:
            LOGGER.exception("Failed to execute %s intent", intent.action)
            return ExecutionResult(
                intent=intent,
                store=store,
                history=history,
                message=ERROR_MESSAGE,
                selected_folder=selected_folder,
            )

    def _dispatch(
        self,
        intent: Intent,
        store: EntityStore,
        history: HistoryManager,
        selected_folder: Optional[str],
    ) -> ExecutionResult:
        if isinstance(intent, (InfoIntent, ListIntent)):
            return ExecutionResult(intent, store, history, intent.summary, selected_folder)

        if isinstance(intent, OpenFolderIntent):
            return ExecutionResult(intent, store, history, intent.summary, intent.folder_id)

        if isinstance(intent, UndoIntent):
            return self._undo(intent, store, history, selected_folder)

        if isinstance(intent, ResetIntent):
            return ExecutionResult(
                intent=intent,
                store=default_store(),
                history=HistoryManager(limit=history.limit),
                message=RESET_MESSAGE,
                selected_folder=None,
                reset=True,
            )

        new_history = history.copy()
        new_history.push(store)
        new_store = store.clone()
        message = intent.summary

        if isinstance(intent, CreateSimpleFolderIntent):
            self._create_folder(new_store, intent.new_folder_name, parent=None)
        elif isinstance(intent, CreateNestedFolderIntent):
            self._create_folder(
                new_store, intent.new_folder_name, parent=intent.parent_folder_id
            )
        elif isinstance(intent, MoveFileIntent):
            target_id = self._ensure_target(new_store, intent.target_folder, intent.create_folder)
            for file in new_store.files:
                if file.name == intent.file_name:
                    file.folder = target_id
        elif isinstance(intent, MoveAllByExtensionIntent):
            target_id = self._ensure_target(new_store, intent.target_folder, intent.create_folder)
            names = set(intent.file_names)
            for file in new_store.files:
                if file.name in names:
                    file.folder = target_id
        elif isinstance(intent, RenameFolderIntent):
            for folder in new_store.folders:
                if folder.id == intent.folder_id:
                    folder.name = intent.new_name
        elif isinstance(intent, DeleteFolderIntent):
            unlinked = self._delete_folder(new_store, intent.folder_id)
            if selected_folder == intent.folder_id:
                selected_folder = None
            if unlinked:
                message += f' {unlinked} file(s) moved to "All Files".'
        else:
            raise TypeError(f"Unsupported intent: {intent!r}")

        LOGGER.info("Applied %s intent (history depth %d)", intent.action, len(new_history))
        return ExecutionResult(
            intent=intent,
            store=new_store,
            history=new_history,
            message=message,
            selected_folder=selected_folder,
            mutated=True,
        )

    def _undo(
        self,
        intent: UndoIntent,
        store: EntityStore,
        history: HistoryManager,
        selected_folder: Optional[str],
    ) -> ExecutionResult:
        new_history = history.copy()
        previous = new_history.pop()
        if previous is None:
            return ExecutionResult(
                intent, store, history, NOTHING_TO_UNDO_MESSAGE, selected_folder
            )
        return ExecutionResult(intent, previous, new_history, UNDO_MESSAGE, selected_folder)

    # ------------------------------------------------------------------ #
    # Mutation helpers (operate on a private copy of the store)          #
    # ------------------------------------------------------------------ #

    def _create_folder(self, store: EntityStore, name: str, *, parent: Optional[str]) -> FolderRecord:
        base = slugify(name) if parent is None else f"{parent}-{slugify(name)}"
        folder = FolderRecord(
            id=self._unique_id(store, base),
            name=name,
            color=self._pick_color(),
            parent=parent,
        )
        store.folders.append(folder)
        return folder

    def _ensure_target(self, store: EntityStore, target: TargetFolder, create: bool) -> str:
        if not create:
            return target.id
        taken = {folder.id for folder in store.folders}
        # Placeholder ids carry no suffix; one is added only if a renamed folder kept this id.
        folder_id = target.id if target.id not in taken else self._unique_id(store, target.id)
        store.folders.append(
            FolderRecord(id=folder_id, name=target.name, color=self._pick_color(), parent=None)
        )
        return folder_id

    def _delete_folder(self, store: EntityStore, folder_id: str) -> int:
        unlinked = 0
        for file in store.files:
            if file.folder == folder_id:
                file.folder = None
                unlinked += 1
        # One level only: grandchildren keep a parent id that no longer exists.
        store.folders = [
            folder
            for folder in store.folders
            if folder.id != folder_id and folder.parent != folder_id
        ]
        return unlinked

    def _unique_id(self, store: EntityStore, base: str) -> str:
        taken = {folder.id for folder in store.folders}
        stamp = self._clock()
        candidate = f"{base}-{stamp}"
        while candidate in taken:
            stamp += 1
            candidate = f"{base}-{stamp}"
        return candidate

    def _pick_color(self) -> str:
        return self._rng.choice(self._colors)


__all__ = [
    "ActionExecutor",
    "ExecutionResult",
    "NOTHING_TO_UNDO_MESSAGE",
    "UNDO_MESSAGE",
    "RESET_MESSAGE",
    "ERROR_MESSAGE",
]
