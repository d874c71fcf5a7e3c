"""Organizer session orchestration."""

from .service import RESET_KEYS, CommandOutcome, FolderView, OrganizerSession

__all__ = ["OrganizerSession", "CommandOutcome", "FolderView", "RESET_KEYS"]
