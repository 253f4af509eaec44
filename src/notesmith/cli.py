"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from notesmith.clients.completion_client import CompletionClient
from notesmith.config import AppConfig, load_config
from notesmith.logging.history_store import RefineHistoryStore
from notesmith.models.settings import SETTING_KEYS
from notesmith.pipeline.prompt_builder import build_prompt
from notesmith.plugin import REFINE_CURRENT_NOTE, NoteSmithPlugin
from notesmith.store.settings_store import JsonSettingsStore, UnknownSettingError
from notesmith.store.vault import Vault
from notesmith.ui.console import ConsoleBusyIndicator, ConsoleNotifier

CREDENTIAL_ENV = "NOTESMITH_API_KEY"

app = typer.Typer(
    name="notesmith",
    help="Refine Markdown notes with a language model.",
    no_args_is_help=True,
)
settings_app = typer.Typer(help="Show or edit the refiner settings.", no_args_is_help=True)
app.add_typer(settings_app, name="settings")

console = Console()
err_console = Console(stderr=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    config = load_config()
    logging.basicConfig(
        level="DEBUG" if verbose else config.logging.level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _settings_store(config: AppConfig) -> JsonSettingsStore:
    return JsonSettingsStore(
        config.storage.resolved_settings_path, credential_env=CREDENTIAL_ENV
    )


def _build_plugin(vault: Path | None) -> tuple[NoteSmithPlugin, Vault]:
    config = load_config()
    workspace = Vault(
        vault or config.vault.resolved_root,
        markdown_extensions=config.vault.markdown_extensions,
    )
    history = None
    if config.logging.record_history:
        history = RefineHistoryStore(config.storage.resolved_history_db_path)
    plugin = NoteSmithPlugin(
        workspace,
        _settings_store(config),
        CompletionClient(timeout=config.client.timeout),
        notifier=ConsoleNotifier(console),
        busy_indicator=ConsoleBusyIndicator(console),
        history=history,
    )
    plugin.on_load()
    return plugin, workspace


def _note_ref(workspace: Vault, note: Path) -> str:
    """Resolve a note given relative to the CWD or to the vault root."""
    path = note.expanduser()
    if not path.is_absolute() and not path.exists():
        path = workspace.root / path
    try:
        ref = workspace.ref_for(path)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    if not workspace.resolve(ref).is_file():
        console.print(f"[red]Note not found: {note}[/red]")
        raise typer.Exit(1)
    return ref


@app.command()
def refine(
    note: Path = typer.Argument(None, help="Note to open and refine"),
    vault: Path = typer.Option(None, "--vault", help="Notes folder (default: config vault.root)"),
) -> None:
    """Refine the active note in place."""
    plugin, workspace = _build_plugin(vault)
    if note is not None:
        workspace.open(_note_ref(workspace, note))

    outcome = asyncio.run(plugin.run_command(REFINE_CURRENT_NOTE))
    if outcome is None:
        console.print("[yellow]No active note to refine.[/yellow]")
        return
    if not outcome.succeeded:
        raise typer.Exit(1)


@app.command("refine-file")
def refine_file(
    note: Path = typer.Argument(help="Markdown note to refine"),
    vault: Path = typer.Option(None, "--vault", help="Notes folder (default: config vault.root)"),
) -> None:
    """Refine a note through its file-menu action (Markdown notes only)."""
    plugin, workspace = _build_plugin(vault)
    ref = _note_ref(workspace, note)

    items = plugin.file_menu_items(ref)
    if not items:
        console.print(f"[yellow]No refine action for non-Markdown file: {ref}[/yellow]")
        raise typer.Exit(1)

    outcome = asyncio.run(items[0].on_click())
    if not outcome.succeeded:
        raise typer.Exit(1)


@app.command()
def prompt(
    note: Path = typer.Argument(help="Note to build the prompt for"),
    vault: Path = typer.Option(None, "--vault", help="Notes folder (default: config vault.root)"),
) -> None:
    """Print the prompt that would be sent for a note, without sending it."""
    plugin, workspace = _build_plugin(vault)
    ref = _note_ref(workspace, note)
    body = asyncio.run(workspace.read(ref))
    typer.echo(build_prompt(body, plugin.settings.current))


@settings_app.command("show")
def settings_show() -> None:
    """Show the current settings (credential masked)."""
    store = _settings_store(load_config())
    current = store.load()

    table = Table(title="NoteSmith Settings")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in current.to_record().items():
        if key == "credential":
            value = current.masked_credential or "[dim](not set)[/dim]"
        table.add_row(key, str(value))
    console.print(table)
    console.print(f"[dim]{store.path}[/dim]")


@settings_app.command("set")
def settings_set(
    key: str = typer.Argument(help=f"One of: {', '.join(SETTING_KEYS)}"),
    value: str = typer.Argument(help="New value (use true/false for useAlternateProvider)"),
) -> None:
    """Change one setting and save it."""
    store = _settings_store(load_config())
    store.load()
    try:
        store.update(key, value)
    except UnknownSettingError:
        console.print(f"[red]Unknown setting: {key}[/red]")
        console.print(f"[dim]Valid keys: {', '.join(SETTING_KEYS)}[/dim]")
        raise typer.Exit(1)
    except ValidationError as e:
        console.print(f"[red]Invalid value for {key}: {e.errors()[0]['msg']}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Saved {key}.[/green]")


@app.command()
def history(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of records"),
    failures: bool = typer.Option(False, "--failures", help="Only failed refines"),
    document: str = typer.Option(None, "--document", "-d", help="Filter by note reference"),
    clear: bool = typer.Option(False, "--clear", help="Delete all recorded history"),
) -> None:
    """Show recent refine diagnostics."""
    config = load_config()
    store = RefineHistoryStore(config.storage.resolved_history_db_path)
    if clear:
        deleted = store.clear()
        console.print(f"[green]Deleted {deleted} history records.[/green]")
        return

    records = store.get_records(document=document, limit=limit, failures_only=failures)
    if not records:
        console.print("[yellow]No refine history.[/yellow]")
        return

    table = Table(title="Refine History")
    table.add_column("Time")
    table.add_column("Note")
    table.add_column("Model")
    table.add_column("Provider")
    table.add_column("Result")
    table.add_column("Detail")
    table.add_column("Elapsed", justify="right")
    for r in records:
        if r.success:
            result = "[green]ok[/green]"
            detail = f"{r.output_chars} chars"
        else:
            result = f"[red]{r.error_kind}[/red]"
            detail = f"{r.status_code} {r.response_body or ''}" if r.status_code else (r.error_message or "")
        table.add_row(
            r.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            escape(r.document),
            escape(r.model_id),
            escape(r.provider),
            result,
            escape(detail[:80]),
            f"{r.elapsed_seconds:.1f}s",
        )
    console.print(table)

    stats = store.get_stats()
    kinds = ", ".join(f"{k}: {v}" for k, v in stats["failures_by_kind"].items()) or "none"
    console.print(
        Panel(
            f"Runs: {stats['total_runs']} | Success: {stats['success_rate']:.0f}%\n"
            f"Failures: {kinds}",
            title="Totals",
        )
    )
