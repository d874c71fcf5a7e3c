"""Command line interface for chatorg."""

from __future__ import annotations

import difflib
import logging
from logging.handlers import RotatingFileHandler
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from chatorg.config import TIMESTAMP_PREFIX, ChatorgConfig, ConfigError, ConfigManager
from chatorg.session import CommandOutcome, OrganizerSession
from chatorg.state import LOG_FILENAME, StateError, StateRepository
from chatorg.state.models import EntityStore, FolderRecord

console = Console()

_EXIT_WORDS = {"exit", "quit", ":q"}


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _load_config() -> ChatorgConfig:
    manager = ConfigManager()
    manager.ensure_exists()
    return manager.load()


def _configure_logging(config: ChatorgConfig, repository: StateRepository, session: str) -> None:
    """Route package logs to the session's rotating log file."""

    logger = logging.getLogger("chatorg")
    logger.setLevel(config.logging.level.upper())
    log_path = repository.initialize(session) / LOG_FILENAME
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == str(log_path):
            return
    handler = RotatingFileHandler(
        log_path,
        maxBytes=config.logging.max_size_mb * 1024 * 1024,
        backupCount=config.logging.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)


def _open_session(ctx: click.Context, config: ChatorgConfig, *, delay: bool = True) -> OrganizerSession:
    """Build and load the session selected by `--session` or configuration."""

    session_name = ctx.obj.get("session") or config.session.name
    repository = StateRepository(config.session.state_dir)
    _configure_logging(config, repository, session_name)
    if delay:
        session = OrganizerSession(config, repository=repository, session_name=session_name)
    else:
        session = OrganizerSession(
            config,
            repository=repository,
            session_name=session_name,
            sleep=lambda _seconds: None,
        )
    return session.load()


def _emit_reply(outcome: CommandOutcome, *, quiet: bool) -> None:
    if quiet:
        return
    style = "green" if outcome.mutated or outcome.reset else "cyan"
    console.print(f"[{style}]{escape(outcome.message)}[/{style}]", highlight=False)


def _add_folder_branches(
    branch: Tree,
    store: EntityStore,
    parent_id: str,
    selected: str | None,
    seen: set[str],
) -> None:
    for folder in store.subfolders(parent_id):
        if folder.id in seen:
            continue
        seen.add(folder.id)
        child = branch.add(_folder_label(folder, store, selected))
        _add_folder_branches(child, store, folder.id, selected, seen)


def _folder_label(folder: FolderRecord, store: EntityStore, selected: str | None) -> str:
    marker = " [bold yellow]<- open[/bold yellow]" if folder.id == selected else ""
    count = len(store.files_in(folder.id))
    return f"[bold]{folder.name}[/bold] [dim]({folder.id}, {count} files)[/dim]{marker}"


def _render_tree(session: OrganizerSession) -> Tree:
    store = session.store
    selected = session.selected_folder
    root_marker = " [bold yellow]<- open[/bold yellow]" if selected is None else ""
    tree = Tree(f"[bold]All Files[/bold] [dim]({len(store.unorganized_files())} files)[/dim]{root_marker}")
    seen: set[str] = set()
    for folder in store.top_level_folders():
        seen.add(folder.id)
        branch = tree.add(_folder_label(folder, store, selected))
        _add_folder_branches(branch, store, folder.id, selected, seen)

    orphans = [folder for folder in store.folders if folder.id not in seen]
    if orphans:
        orphan_branch = tree.add("[yellow]Orphaned folders[/yellow]")
        for folder in orphans:
            orphan_branch.add(_folder_label(folder, store, selected))
    return tree


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="chatorg")
@click.option("--session", "session_name", type=str, help="Name of the persisted session to use.")
@click.pass_context
def cli(ctx: click.Context, session_name: str | None) -> None:
    """chatorg organizes a virtual file tree through plain-language commands.

    Args:
        ctx: Click context shared with subcommands.
        session_name: Optional session override.
    """
    ctx.ensure_object(dict)
    ctx.obj["session"] = session_name


@cli.command()
@click.argument("words", nargs=-1, required=True)
@click.option("--json", "json_output", is_flag=True, help="Emit the outcome as JSON.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.option("--no-delay", is_flag=True, help="Skip the response delay.")
@click.pass_context
def say(
    ctx: click.Context,
    words: tuple[str, ...],
    json_output: bool,
    quiet: bool,
    no_delay: bool,
) -> None:
    """Run one organizer command, e.g. `chatorg say move vacation.png to Images`.

    Args:
        ctx: Click context for parameter inspection.
        words: Command text split by the shell.
        json_output: When True, emit JSON instead of textual output.
        quiet: When True, suppress the reply.
        no_delay: When True, skip the configured response delay.
    """

    try:
        config = _load_config()
        explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
        quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
        if json_output:
            if explicit_quiet and quiet_enabled:
                raise click.ClickException("--json cannot be combined with --quiet.")
            quiet_enabled = False

        session = _open_session(ctx, config, delay=not no_delay)
        outcome = session.submit(" ".join(words))
        if outcome is None:
            raise click.ClickException("Command was empty or another command is still running.")

        if json_output:
            payload = outcome.json_payload
            payload["session"] = session.name
            payload["history_depth"] = len(session.history)
            console.print_json(data=payload)
        else:
            _emit_reply(outcome, quiet=quiet_enabled)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except StateError as exc:
        _handle_cli_error(str(exc), code="state_error", json_output=json_output, original=exc)
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_output, original=exc)
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while running command: {exc}",
            code="internal_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )


@cli.command()
@click.option("--no-delay", is_flag=True, help="Skip the response delay.")
@click.pass_context
def shell(ctx: click.Context, no_delay: bool) -> None:
    """Start an interactive prompt; type `exit` or `quit` to leave.

    Args:
        ctx: Click context shared with the group.
        no_delay: When True, skip the configured response delay.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    try:
        config = _load_config()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    session = _open_session(ctx, config, delay=not no_delay)
    last = session.messages[-1] if session.messages else None
    if last is not None and last.sender == "ai":
        console.print(f"[cyan]{escape(last.text)}[/cyan]", highlight=False)

    while True:
        try:
            text = click.prompt("you", prompt_suffix="> ", default="", show_default=False)
        except (EOFError, click.Abort):
            break
        if text.strip().lower() in _EXIT_WORDS:
            break
        outcome = session.submit(text)
        if outcome is not None:
            _emit_reply(outcome, quiet=False)


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit the tree as JSON.")
@click.pass_context
def status(ctx: click.Context, json_output: bool) -> None:
    """Show the folder tree, the open folder and the undo depth.

    Args:
        ctx: Click context shared with the group.
        json_output: When True, emit JSON instead of a rendered tree.
    """
    try:
        config = _load_config()
        session = _open_session(ctx, config, delay=False)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(
            data={
                "session": session.name,
                "files": [file.model_dump(mode="json") for file in session.store.files],
                "folders": [folder.model_dump(mode="json") for folder in session.store.folders],
                "selected_folder": session.selected_folder,
                "history_depth": len(session.history),
            }
        )
        return

    console.print(_render_tree(session))

    view = session.current_view()
    heading = view.folder.name if view.folder is not None else "All Files"
    table = Table(title=heading)
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    for folder in view.subfolders:
        table.add_row(f"{folder.name}/", "folder", "")
    for file in view.files:
        table.add_row(file.name, file.type, file.size)
    console.print(table)
    console.print(f"[dim]Undo steps available: {len(session.history)}[/dim]")


@cli.command()
@click.option("--limit", type=int, default=None, help="Number of recent messages to show.")
@click.pass_context
def transcript(ctx: click.Context, limit: int | None) -> None:
    """Print the recent conversation for the session.

    Args:
        ctx: Click context shared with the group.
        limit: Maximum number of messages; defaults to configuration.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    try:
        config = _load_config()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    session = _open_session(ctx, config, delay=False)
    count = limit if limit is not None else config.cli.transcript_limit
    messages = session.messages[-count:] if count > 0 else []
    for message in messages:
        style = "bold" if message.sender == "user" else "cyan"
        console.print(f"[{style}]{message.sender}>[/{style}] {escape(message.text)}", highlight=False)


@cli.command()
@click.argument("height", type=int)
@click.pass_context
def layout(ctx: click.Context, height: int) -> None:
    """Set the transcript panel HEIGHT used by renderers.

    Args:
        ctx: Click context shared with the group.
        height: Requested height; clamped to the supported range.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    try:
        config = _load_config()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    session = _open_session(ctx, config, delay=False)
    stored = session.set_chat_height(height)
    console.print(f"[green]Chat height set to {stored}.[/green]")


@cli.group()
def config() -> None:
    """Manage chatorg configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        no_env: If True, ignore environment-derived overrides.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()
    before = manager.read_text().splitlines()

    try:
        manager.set_value(key, value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    diff = [
        line
        for line in difflib.unified_diff(
            before,
            manager.read_text().splitlines(),
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if TIMESTAMP_PREFIX not in line
    ]
    changed = [line for line in diff if not line.startswith(("+++", "---"))]
    if not any(line.startswith(("+", "-")) for line in changed):
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {key}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return
    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        manager.apply_text(edited)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
