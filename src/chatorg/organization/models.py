"""Intent data models produced by the command parser."""

from __future__ import annotations

from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field


class IntentBase(BaseModel):
    """Common fields shared by every intent.

    Attributes:
        summary: Outcome message decided at parse time.
    """

    summary: str = ""


class TargetFolder(BaseModel):
    """Destination of a move; may describe a folder that does not exist yet."""

    id: str
    name: str


class UndoIntent(IntentBase):
    action: Literal["undo"] = "undo"


class ResetIntent(IntentBase):
    action: Literal["reset"] = "reset"


class InfoIntent(IntentBase):
    """Informational reply: lookup failures, conflicts and help text."""

    action: Literal["info"] = "info"


class ListIntent(IntentBase):
    action: Literal["list"] = "list"


class OpenFolderIntent(IntentBase):
    action: Literal["open_folder"] = "open_folder"
    folder_id: str


class RenameFolderIntent(IntentBase):
    action: Literal["rename_folder"] = "rename_folder"
    folder_id: str
    old_name: str
    new_name: str


class DeleteFolderIntent(IntentBase):
    action: Literal["delete_folder"] = "delete_folder"
    folder_id: str
    folder_name: str


class CreateNestedFolderIntent(IntentBase):
    action: Literal["create_nested_folder"] = "create_nested_folder"
    new_folder_name: str
    parent_folder_id: str
    parent_folder_name: str


class CreateSimpleFolderIntent(IntentBase):
    action: Literal["create_simple_folder"] = "create_simple_folder"
    new_folder_name: str


class MoveAllByExtensionIntent(IntentBase):
    """Move every file with a given extension.

    Attributes:
        file_extension: Lowercased extension without the leading dot.
        target_folder: Destination folder, possibly a placeholder.
        create_folder: Whether the executor must create the destination first.
        file_names: Names of the matched files, captured at parse time.
    """

    action: Literal["move_all_by_extension"] = "move_all_by_extension"
    file_extension: str
    target_folder: TargetFolder
    create_folder: bool = False
    file_names: List[str] = Field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.file_names)


class MoveFileIntent(IntentBase):
    action: Literal["move_file"] = "move_file"
    file_name: str
    target_folder: TargetFolder
    create_folder: bool = False


Intent = Annotated[
    Union[
        UndoIntent,
        ResetIntent,
        InfoIntent,
        ListIntent,
        OpenFolderIntent,
        RenameFolderIntent,
        DeleteFolderIntent,
        CreateNestedFolderIntent,
        CreateSimpleFolderIntent,
        MoveAllByExtensionIntent,
        MoveFileIntent,
    ],
    Field(discriminator="action"),
]


__all__ = [
    "IntentBase",
    "TargetFolder",
    "UndoIntent",
    "ResetIntent",
    "InfoIntent",
    "ListIntent",
    "OpenFolderIntent",
    "RenameFolderIntent",
    "DeleteFolderIntent",
    "CreateNestedFolderIntent",
    "CreateSimpleFolderIntent",
    "MoveAllByExtensionIntent",
    "MoveFileIntent",
    "Intent",
]
