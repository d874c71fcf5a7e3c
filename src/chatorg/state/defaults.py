"""Seed data restored on first launch and by the reset command."""

from __future__ import annotations

from .models import EntityStore, FileRecord, FolderRecord, Message, SessionState

DEFAULT_CHAT_HEIGHT = 600
MIN_CHAT_HEIGHT = 300
MAX_CHAT_HEIGHT = 800

EXAMPLE_COMMANDS = (
    "'move vacation.png to Images'",
    "'move all png files to Images'",
    "'create folder called Projects'",
    "'create folder Photos inside Media'",
    "'rename Images to Pictures'",
    "'delete Documents folder'",
)

WELCOME_TEXT = (
    "Hi 👋 I'm your File Organizer. Try commands like:\n"
    + "\n".join(f"• {example}" for example in EXAMPLE_COMMANDS)
    + "\n• 'undo' to revert last action\n• 'reset' to restore defaults"
)

_SEED_FILES = (
    (1, "vacation.png", "image", "2.3 MB"),
    (2, "report.pdf", "document", "450 KB"),
    (3, "song.mp3", "audio", "5.1 MB"),
    (4, "presentation.pptx", "document", "8.2 MB"),
    (5, "photo1.jpg", "image", "3.4 MB"),
    (6, "video.mp4", "video", "45 MB"),
    (7, "screenshot.png", "image", "1.2 MB"),
    (8, "notes.txt", "document", "12 KB"),
)

_SEED_FOLDERS = (
    ("images", "Images", "bg-blue-500"),
    ("documents", "Documents", "bg-green-500"),
    ("media", "Media", "bg-purple-500"),
)


def default_files() -> list[FileRecord]:
    return [
        FileRecord(id=file_id, name=name, type=kind, size=size)
        for file_id, name, kind, size in _SEED_FILES
    ]


def default_folders() -> list[FolderRecord]:
    return [FolderRecord(id=folder_id, name=name, color=color) for folder_id, name, color in _SEED_FOLDERS]


def default_store() -> EntityStore:
    """Return a fresh copy of the seed file/folder set."""
    return EntityStore(files=default_files(), folders=default_folders())


def welcome_message() -> Message:
    return Message(id=1, text=WELCOME_TEXT, sender="ai")


def default_session() -> SessionState:
    """Return the state used when nothing has been persisted yet."""
    return SessionState(
        store=default_store(),
        messages=[welcome_message()],
        history=[],
        chat_height=DEFAULT_CHAT_HEIGHT,
        selected_folder=None,
    )


__all__ = [
    "DEFAULT_CHAT_HEIGHT",
    "MIN_CHAT_HEIGHT",
    "MAX_CHAT_HEIGHT",
    "EXAMPLE_COMMANDS",
    "WELCOME_TEXT",
    "default_files",
    "default_folders",
    "default_store",
    "welcome_message",
    "default_session",
]
