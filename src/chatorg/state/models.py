"""Entity and session data models for organizer sessions."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

FileType = Literal["image", "document", "audio", "video", "other"]


class FileRecord(BaseModel):
    """Metadata describing a file in the virtual tree.

    Attributes:
        id: Stable identifier for the file.
        name: Display name including the extension.
        type: Coarse media category used by renderers.
        size: Human-readable size string.
        folder: Identifier of the containing folder, or None when unorganized.
    """

    id: int
    name: str
    type: FileType = "other"
    size: str = ""
    folder: Optional[str] = None

    @property
    def extension(self) -> str:
        """Return the lowercased text after the last dot, or an empty string."""
        parts = self.name.split(".")
        return parts[-1].lower() if len(parts) > 1 else ""


class FolderRecord(BaseModel):
    """A folder node; `parent` links folders into a forest."""

    id: str
    name: str
    color: str = ""
    parent: Optional[str] = None


class Message(BaseModel):
    """A single transcript entry."""

    id: int
    text: str
    sender: Literal["user", "ai"]


class EntityStore(BaseModel):
    """Current files and folders with lookup helpers.

    Instances are treated as values: the executor builds a new store for every
    mutation instead of editing one in place.
    """

    files: List[FileRecord] = Field(default_factory=list)
    folders: List[FolderRecord] = Field(default_factory=list)

    def clone(self) -> "EntityStore":
        """Return a deep, independent copy of the store."""
        return self.model_copy(deep=True)

    def find_folder(self, query: str) -> Optional[FolderRecord]:
        """Resolve a folder from free text.

        Matches, in priority order across all folders: case-insensitive exact
        name, exact id, then id containing the query.

        Args:
            query: Folder name or id fragment typed by the user.

        Returns:
            Optional[FolderRecord]: Matching folder, or None.
        """
        needle = query.lower().strip()
        for folder in self.folders:
            if folder.name.lower() == needle:
                return folder
        for folder in self.folders:
            if folder.id == needle:
                return folder
        for folder in self.folders:
            if needle in folder.id:
                return folder
        return None

    def find_file(self, name: str) -> Optional[FileRecord]:
        """Return the first file whose name matches case-insensitively."""
        needle = name.lower()
        return next((file for file in self.files if file.name.lower() == needle), None)

    def folder_by_id(self, folder_id: str | None) -> Optional[FolderRecord]:
        """Return the folder with exactly this id, if any."""
        if folder_id is None:
            return None
        return next((folder for folder in self.folders if folder.id == folder_id), None)

    def files_in(self, folder_id: str) -> List[FileRecord]:
        return [file for file in self.files if file.folder == folder_id]

    def unorganized_files(self) -> List[FileRecord]:
        return [file for file in self.files if not file.folder]

    def subfolders(self, parent_id: str | None) -> List[FolderRecord]:
        return [folder for folder in self.folders if folder.parent == parent_id]

    def top_level_folders(self) -> List[FolderRecord]:
        return [folder for folder in self.folders if not folder.parent]

    def files_with_extension(self, extension: str) -> List[FileRecord]:
        wanted = extension.lower()
        return [file for file in self.files if file.extension == wanted]


# A history entry is a full copy of the store taken before a mutation.
Snapshot = EntityStore


class SessionState(BaseModel):
    """Everything persisted for one organizer session.

    Attributes:
        store: Current files and folders.
        messages: Conversation transcript.
        history: Undo snapshots, oldest first.
        chat_height: Layout metric for the transcript panel.
        selected_folder: Folder currently opened, or None for "All Files".
    """

    store: EntityStore = Field(default_factory=EntityStore)
    messages: List[Message] = Field(default_factory=list)
    history: List[Snapshot] = Field(default_factory=list)
    chat_height: int = 600
    selected_folder: Optional[str] = None


__all__ = [
    "FileType",
    "FileRecord",
    "FolderRecord",
    "Message",
    "EntityStore",
    "Snapshot",
    "SessionState",
]
