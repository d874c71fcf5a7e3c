"""Rule-based command parser that turns text into intents."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from chatorg.state.models import EntityStore, FolderRecord

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

LOGGER = logging.getLogger(__name__)

# Folder names: word characters, whitespace and hyphens, optionally quoted.
_NAME = r"""["']?([\w\s-]+)["']?"""
# File names additionally allow dots.
_FILE_NAME = r"""["']?([\w\s.-]+)["']?"""
_CREATE_PREFIX = r"create\s+(?:a\s+)?(?:new\s+)?folder\s+(?:called\s+|named\s+)?"

UNDO_PATTERN = re.compile(r"^(undo|revert|go back|reverse|cancel)$")
RESET_PATTERN = re.compile(r"^(reset|clear all|start over|restore default)$")
RENAME_PATTERN = re.compile(rf"rename\s+(?:folder\s+)?{_NAME}\s+to\s+{_NAME}")
DELETE_PATTERN = re.compile(rf"delete\s+(?:folder\s+)?{_NAME}")
CREATE_NESTED_PATTERN = re.compile(
    rf"{_CREATE_PREFIX}{_NAME}\s+(?:inside|in|within|under)\s+{_NAME}"
)
CREATE_SIMPLE_PATTERN = re.compile(rf"{_CREATE_PREFIX}{_NAME}")
MOVE_ALL_PATTERN = re.compile(rf"move\s+all\s+\.?(\w+)\s+(?:files?\s+)?(?:to|into)\s+{_NAME}")
MOVE_SINGLE_PATTERN = re.compile(rf"move\s+{_FILE_NAME}\s+(?:to|into)\s+{_NAME}")
LIST_PATTERN = re.compile(r"(?:list|show|display)\s+(?:all\s+)?(?:files|folders)")
OPEN_PATTERN = re.compile(rf"open\s+(?:folder\s+)?{_NAME}")

HELP_TEXT = (
    "I couldn't understand that command. Try:\n"
    "• 'move vacation.png to Images'\n"
    "• 'move all png files to Images'\n"
    "• 'create folder called Projects'\n"
    "• 'rename Images to Pictures'\n"
    "• 'delete Documents folder'"
)


def fix_name(value: str) -> str:
    """Trim, collapse whitespace runs and uppercase the first character."""
    collapsed = re.sub(r"\s+", " ", value.strip())
    return collapsed[:1].upper() + collapsed[1:]


def slugify(value: str) -> str:
    """Return the id form of a folder name: lowercase with whitespace runs as hyphens."""
    return re.sub(r"\s+", "-", value.strip().lower())


def _not_found(kind: str, name: str) -> InfoIntent:
    return InfoIntent(summary=f'I couldn\'t find a {kind} named "{name}".')


@dataclass(frozen=True)
class CommandRule:
    """A pattern paired with the builder that turns its match into an intent."""

    name: str
    pattern: re.Pattern[str]
    build: Callable[[re.Match[str], EntityStore], Intent]


class CommandParser:
    """Resolve commands against an ordered list of rules.

    The first rule whose pattern matches wins. Order matters: nested folder
    creation must be tried before simple creation, and moving by extension
    before moving a single file, because the later patterns also match the
    earlier commands' text.
    """

    def __init__(self) -> None:
        self._rules: tuple[CommandRule, ...] = (
            CommandRule("undo", UNDO_PATTERN, lambda _m, _s: UndoIntent()),
            CommandRule("reset", RESET_PATTERN, lambda _m, _s: ResetIntent()),
            CommandRule("rename_folder", RENAME_PATTERN, self._build_rename),
            CommandRule("delete_folder", DELETE_PATTERN, self._build_delete),
            CommandRule("create_nested_folder", CREATE_NESTED_PATTERN, self._build_create_nested),
            CommandRule("create_simple_folder", CREATE_SIMPLE_PATTERN, self._build_create_simple),
            CommandRule("move_all_by_extension", MOVE_ALL_PATTERN, self._build_move_all),
            CommandRule("move_file", MOVE_SINGLE_PATTERN, self._build_move_file),
            CommandRule("list", LIST_PATTERN, self._build_list),
            CommandRule("open_folder", OPEN_PATTERN, self._build_open),
        )

    @property
    def rules(self) -> tuple[CommandRule, ...]:
        """Return the rules in evaluation order."""
        return self._rules

    def parse(self, text: str, store: EntityStore) -> Intent:
        """Turn a raw command into an intent.

        Args:
            text: Command typed by the user.
            store: Current files and folders used to resolve names.

        Returns:
            Intent: The first matching rule's intent, or help text when no
            rule matches.
        """
        command = text.lower().strip()
        for rule in self._rules:
            match = rule.pattern.search(command)
            if match is None:
                continue
            intent = rule.build(match, store)
            LOGGER.debug("Command %r matched rule %s -> %s", command, rule.name, intent.action)
            return intent

        LOGGER.debug("Command %r matched no rule", command)
        return InfoIntent(summary=HELP_TEXT)

    # ------------------------------------------------------------------ #
    # Builders                                                           #
    # ------------------------------------------------------------------ #

    def _build_rename(self, match: re.Match[str], store: EntityStore) -> Intent:
        old_name = match.group(1).strip()
        new_name = fix_name(match.group(2))
        folder = store.find_folder(old_name)
        if folder is None:
            return _not_found("folder", old_name)

        existing = store.find_folder(new_name)
        if existing is not None and existing.id != folder.id:
            return InfoIntent(summary=f'A folder named "{new_name}" already exists.')

        return RenameFolderIntent(
            folder_id=folder.id,
            old_name=folder.name,
            new_name=new_name,
            summary=f'Renamed "{folder.name}" to "{new_name}".',
        )

    def _build_delete(self, match: re.Match[str], store: EntityStore) -> Intent:
        folder_name = match.group(1).strip()
        folder = self._resolve_folder_phrase(folder_name, store)
        if folder is None:
            return _not_found("folder", folder_name)

        return DeleteFolderIntent(
            folder_id=folder.id,
            folder_name=folder.name,
            summary=f'Deleted "{folder.name}" folder.',
        )

    def _build_create_nested(self, match: re.Match[str], store: EntityStore) -> Intent:
        new_name = fix_name(match.group(1))
        parent_name = match.group(2).strip()
        parent = store.find_folder(parent_name)
        if parent is None:
            return _not_found("folder", parent_name)

        duplicate = any(
            folder.name.lower() == new_name.lower() and folder.parent == parent.id
            for folder in store.folders
        )
        if duplicate:
            return InfoIntent(
                summary=f'A folder named "{new_name}" already exists inside {parent.name}.'
            )

        return CreateNestedFolderIntent(
            new_folder_name=new_name,
            parent_folder_id=parent.id,
            parent_folder_name=parent.name,
            summary=f'Created "{new_name}" folder inside {parent.name}.',
        )

    def _build_create_simple(self, match: re.Match[str], store: EntityStore) -> Intent:
        new_name = fix_name(match.group(1))
        if store.find_folder(new_name) is not None:
            return InfoIntent(summary=f'A folder named "{new_name}" already exists.')

        return CreateSimpleFolderIntent(
            new_folder_name=new_name,
            summary=f'Created "{new_name}" folder.',
        )

    def _build_move_all(self, match: re.Match[str], store: EntityStore) -> Intent:
        extension = match.group(1).lower()
        matching = store.files_with_extension(extension)
        if not matching:
            return InfoIntent(summary=f"No {extension} files found.")

        target, create_folder = self._resolve_target(match.group(2), store)
        count = len(matching)
        if create_folder:
            summary = (
                f'Created "{target.name}" folder and moved {count} {extension} file(s) into it.'
            )
        else:
            summary = f"Moved {count} {extension} file(s) to {target.name}."

        return MoveAllByExtensionIntent(
            file_extension=extension,
            target_folder=target,
            create_folder=create_folder,
            file_names=[file.name for file in matching],
            summary=summary,
        )

    def _build_move_file(self, match: re.Match[str], store: EntityStore) -> Intent:
        file_name = match.group(1).strip()
        file = store.find_file(file_name)
        if file is None:
            return _not_found("file", file_name)

        target, create_folder = self._resolve_target(match.group(2), store)
        if create_folder:
            summary = f'Created "{target.name}" folder and moved "{file.name}" into it.'
        else:
            summary = f'Moved "{file.name}" to {target.name}.'

        return MoveFileIntent(
            file_name=file.name,
            target_folder=target,
            create_folder=create_folder,
            summary=summary,
        )

    def _build_list(self, _match: re.Match[str], store: EntityStore) -> Intent:
        return ListIntent(
            summary=f"You have {len(store.files)} file(s) and {len(store.folders)} folder(s)."
        )

    def _build_open(self, match: re.Match[str], store: EntityStore) -> Intent:
        folder_name = match.group(1).strip()
        folder = self._resolve_folder_phrase(folder_name, store)
        if folder is None:
            return _not_found("folder", folder_name)

        return OpenFolderIntent(folder_id=folder.id, summary=f"Opening {folder.name} folder.")

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _resolve_folder_phrase(self, phrase: str, store: EntityStore) -> FolderRecord | None:
        """Look up a folder, also accepting a trailing "folder" word ("delete images folder")."""
        folder = store.find_folder(phrase)
        if folder is None and phrase.endswith(" folder"):
            folder = store.find_folder(phrase[: -len(" folder")])
        return folder

    def _resolve_target(self, raw_name: str, store: EntityStore) -> tuple[TargetFolder, bool]:
        existing = store.find_folder(raw_name)
        if existing is not None:
            return TargetFolder(id=existing.id, name=existing.name), False
        return TargetFolder(id=slugify(raw_name), name=fix_name(raw_name)), True


__all__ = [
    "CommandParser",
    "CommandRule",
    "HELP_TEXT",
    "fix_name",
    "slugify",
]
