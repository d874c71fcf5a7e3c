"""Command parsing, execution and undo history."""

from .executor import ActionExecutor, ExecutionResult
from .history import DEFAULT_HISTORY_LIMIT, HistoryManager
from .models import Intent, TargetFolder
from .planner import CommandParser, fix_name, slugify

__all__ = [
    "ActionExecutor",
    "ExecutionResult",
    "HistoryManager",
    "DEFAULT_HISTORY_LIMIT",
    "CommandParser",
    "Intent",
    "TargetFolder",
    "fix_name",
    "slugify",
]
