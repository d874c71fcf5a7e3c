"""CLI integration tests for session commands."""

from __future__ import annotations

import json
import os
from pathlib import Path

from click.testing import CliRunner

from chatorg.cli import cli


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    """Return environment variables pointing HOME to a temp directory.

    Args:
        tmp_path: Temporary directory provided by pytest.

    Returns:
        dict[str, str]: Environment mapping with HOME set.
    """
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    return env


def _session_dir(tmp_path: Path, name: str = "default") -> Path:
    return tmp_path / "home" / ".chatorg" / "sessions" / name


def test_say_applies_command_and_persists(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["say", "--no-delay", "move", "vacation.png", "to", "Images"], env=env)

    assert result.exit_code == 0
    assert 'Moved "vacation.png" to Images.' in result.output
    files = json.loads((_session_dir(tmp_path) / "files.json").read_text(encoding="utf-8"))
    assert {entry["name"]: entry["folder"] for entry in files}["vacation.png"] == "images"
    assert (_session_dir(tmp_path) / "chatorg.log").exists()


def test_say_json_reports_outcome(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["say", "--no-delay", "--json", "create folder called Projects"], env=env
    )

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["action"] == "create_simple_folder"
    assert payload["message"] == 'Created "Projects" folder.'
    assert payload["mutated"] is True
    assert payload["session"] == "default"
    assert payload["history_depth"] == 1


def test_say_json_and_quiet_conflict(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["say", "--json", "--quiet", "list files"], env=env)

    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["error"]["code"] == "cli_error"


def test_undo_across_invocations(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    runner.invoke(cli, ["say", "--no-delay", "move all png files to Pictures"], env=env)
    result = runner.invoke(cli, ["say", "--no-delay", "--json", "undo"], env=env)

    payload = json.loads(result.output)
    assert payload["message"] == "✅ Undone! Restored to previous state."
    assert payload["history_depth"] == 0

    status = runner.invoke(cli, ["status", "--json"], env=env)
    state = json.loads(status.output)
    assert [folder["name"] for folder in state["folders"]] == ["Images", "Documents", "Media"]


def test_sessions_are_separate(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    runner.invoke(
        cli, ["--session", "work", "say", "--no-delay", "create folder called Reports"], env=env
    )

    work = json.loads(runner.invoke(cli, ["--session", "work", "status", "--json"], env=env).output)
    default = json.loads(runner.invoke(cli, ["status", "--json"], env=env).output)
    assert work["session"] == "work"
    assert "Reports" in [folder["name"] for folder in work["folders"]]
    assert "Reports" not in [folder["name"] for folder in default["folders"]]


def test_status_renders_tree(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    runner.invoke(cli, ["say", "--no-delay", "create folder Clips inside Media"], env=env)
    runner.invoke(cli, ["say", "--no-delay", "open media"], env=env)

    result = runner.invoke(cli, ["status"], env=env)

    assert result.exit_code == 0
    assert "All Files" in result.output
    assert "Clips" in result.output
    assert "<- open" in result.output
    assert "Undo steps available: 1" in result.output


def test_transcript_shows_recent_messages(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    runner.invoke(cli, ["say", "--no-delay", "list files"], env=env)

    result = runner.invoke(cli, ["transcript", "--limit", "2"], env=env)

    assert result.exit_code == 0
    assert "user> list files" in result.output
    assert "ai> You have 8 file(s) and 3 folder(s)." in result.output
    assert "File Organizer" not in result.output


def test_layout_clamps_height(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["layout", "2000"], env=env)

    assert result.exit_code == 0
    assert "Chat height set to 800." in result.output
    stored = json.loads((_session_dir(tmp_path) / "chat_height.json").read_text(encoding="utf-8"))
    assert stored == 800


def test_shell_processes_until_exit(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli,
        ["shell", "--no-delay"],
        input="create folder called Inbox\nlist files\nexit\n",
        env=env,
    )

    assert result.exit_code == 0
    assert 'Created "Inbox" folder.' in result.output
    assert "You have 8 file(s) and 4 folder(s)." in result.output
