"""Configuration models describing chatorg settings."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_FOLDER_COLORS = [
    "bg-blue-500",
    "bg-green-500",
    "bg-purple-500",
    "bg-orange-500",
    "bg-pink-500",
    "bg-red-500",
    "bg-indigo-500",
    "bg-teal-500",
]


class ChatorgBaseModel(BaseModel):
    """Shared configuration for chatorg Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class SessionSettings(ChatorgBaseModel):
    """Persistence options for organizer sessions.

    Attributes:
        name: Session used when no `--session` flag is supplied.
        state_dir: Directory that holds one sub-directory per session.
    """

    name: str = "default"
    state_dir: str = "~/.chatorg/sessions"


class EngineSettings(ChatorgBaseModel):
    """Command engine behavior.

    Attributes:
        history_limit: Maximum number of undo snapshots retained.
        response_delay_ms: Fixed pause applied before each command is parsed.
        folder_colors: Palette used when assigning colors to new folders.
    """

    history_limit: int = Field(default=20, ge=1)
    response_delay_ms: int = Field(default=600, ge=0)
    folder_colors: List[str] = Field(default_factory=lambda: list(DEFAULT_FOLDER_COLORS))


class LoggingSettings(ChatorgBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    max_size_mb: int = 10
    backup_count: int = 5


class CLIOptions(ChatorgBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        transcript_limit: Default number of transcript messages to display.
    """

    quiet_default: bool = False
    transcript_limit: int = 20


class ChatorgConfig(ChatorgBaseModel):
    """Top-level configuration struct for chatorg.

    Attributes:
        session: Session persistence settings.
        engine: Command engine settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    session: SessionSettings = Field(default_factory=SessionSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "ChatorgBaseModel",
    "SessionSettings",
    "EngineSettings",
    "LoggingSettings",
    "CLIOptions",
    "ChatorgConfig",
    "DEFAULT_FOLDER_COLORS",
]
