"""Typer CLI entrypoint for wtm."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import Settings, load_settings
from .exceptions import UserAbort, WtmError
from .hooks import HookRunner
from .interactive import (
    ACTION_OPEN,
    ACTION_REMOVE,
    confirm,
    select_branch,
    select_worktree,
    select_worktree_action,
)
from .logging_config import setup_logging
from .models import HookOutcome, HookResult, RemovalResult, Worktree
from .root import resolve_root, resolve_root_from_common_dir
from .worktrees import WorktreeManager

app = typer.Typer(
    help="Manage short-lived git worktrees.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@dataclass(slots=True)
class AppState:
    settings: Settings
    cwd: Path
    console: Console
    verbose: bool = False

    def manager(self) -> WorktreeManager:
        return WorktreeManager.for_path(self.cwd, self.settings)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"wtm {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    repo: Optional[Path] = typer.Option(
        None,
        "--repo",
        "-r",
        help="Directory to operate from (defaults to current working directory).",
        dir_okay=True,
        file_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every git invocation."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the wtm version and exit.",
    ),
) -> None:
    _ = version  # handled via callback
    console = Console()
    setup_logging(verbose)
    try:
        settings = load_settings()
    except WtmError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc
    cwd = repo.expanduser().resolve() if repo else Path.cwd()
    ctx.obj = AppState(settings=settings, cwd=cwd, console=console, verbose=verbose)


def _require_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if not isinstance(state, AppState):  # pragma: no cover
        raise typer.Exit(1)
    return state


@contextmanager
def _exit_on_error(state: AppState) -> Iterator[None]:
    try:
        yield
    except UserAbort as exc:
        state.console.print(f"[yellow]{exc}[/yellow]")
        raise typer.Exit(1) from exc
    except WtmError as exc:
        state.console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc


@app.command("list")
def list_(
    ctx: typer.Context,
    json_: bool = typer.Option(False, "--json", "-j", help="Output JSON with status and recent commits."),
    interactive: bool = typer.Option(
        False, "--interactive", "-i", help="Pick a worktree to open or remove."
    ),
) -> None:
    """List all worktrees."""
    state = _require_state(ctx)
    with _exit_on_error(state):
        manager = state.manager()
        entries = manager.list_worktrees()
        if not entries:
            state.console.print("[yellow]No worktrees found[/yellow]")
            return
        if interactive:
            _interactive_list(state, manager, entries)
            return
        enriched = [manager.enrich(entry) for entry in entries]

    if json_:
        state.console.print_json(data=[item.to_dict() for item in enriched])
        return

    table = Table(title="Worktrees", show_lines=False)
    table.add_column("Branch", no_wrap=True)
    table.add_column("Path")
    table.add_column("HEAD", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    for item in enriched:
        entry = item.worktree
        branch = entry.branch or "[red](detached)[/red]"
        if item.error is not None:
            status = f"[red]Error: {item.error}[/red]"
        elif item.status is None or item.status.is_clean:
            status = "[green]clean[/green]"
        else:
            status = f"[yellow]{item.status.describe()}[/yellow]"
        table.add_row(branch, str(entry.path), entry.head[:8], status)
    state.console.print(table)


def _interactive_list(state: AppState, manager: WorktreeManager, entries: list[Worktree]) -> None:
    selected = select_worktree(entries)
    action = select_worktree_action(selected)
    if action == ACTION_OPEN:
        state.console.print("[green]To change to this worktree, run:[/green]")
        state.console.print(f"  [cyan]cd[/cyan] {selected.path}")
        return
    if action != ACTION_REMOVE or not selected.branch:
        state.console.print("[dim]Cancelled[/dim]")
        return
    if not confirm(f"This will remove the worktree and delete the branch '{selected.branch}'. Continue?"):
        state.console.print("[dim]Cancelled[/dim]")
        return
    _report_removal(state, manager.remove_worktree(selected.branch))


@app.command()
def add(
    ctx: typer.Context,
    branch: Optional[str] = typer.Argument(None, help="Branch to check out or create (prompted when omitted)."),
    base: Optional[str] = typer.Option(
        None,
        "--base",
        "-b",
        help="Starting point when the branch does not exist yet (defaults to HEAD).",
    ),
    path_only: bool = typer.Option(False, "--path-only", help="Print only the new worktree path."),
) -> None:
    """Create a worktree and run the lifecycle hook."""
    state = _require_state(ctx)
    with _exit_on_error(state):
        manager = state.manager()
        branch = (branch or "").strip() or select_branch(manager.list_branches())
        target = manager.add_worktree(branch, base)
        hook = HookRunner(resolve_root_from_common_dir(state.cwd), state.settings)

        if path_only:
            typer.echo(str(target))
            hook.execute(target, branch)
            return

        state.console.print(f"[green]Created worktree at {target}[/green]")
        state.console.print(f"Branch: [cyan]{branch}[/cyan]")
        if hook.exists():
            state.console.print(f"Running hook {hook.hook_path.name}…")
        _report_hook(state, hook.execute(target, branch))

    state.console.print("\n[bold]Next steps:[/bold]")
    state.console.print(f"  [cyan]cd[/cyan] {target}")


def _report_hook(state: AppState, result: HookResult) -> None:
    if result.outcome is HookOutcome.SUCCEEDED:
        state.console.print("[green]Hook executed successfully[/green]")
    elif result.outcome is HookOutcome.FAILED:
        state.console.print(f"[red]Hook failed:[/red] {result.error}")


@app.command()
def remove(
    ctx: typer.Context,
    branch: str = typer.Argument(..., help="Branch whose worktree should be removed."),
    force: bool = typer.Option(False, "--force", "-f", help="Skip the confirmation prompt."),
) -> None:
    """Remove a worktree and delete its branch."""
    state = _require_state(ctx)
    with _exit_on_error(state):
        manager = state.manager()
        entry = manager.find_worktree(branch)
        state.console.print("\n[bold]Worktree to remove:[/bold]")
        state.console.print(f"  Branch: [cyan]{branch}[/cyan]")
        state.console.print(f"  Path:   {entry.path}\n")
        if not force and not confirm(
            f"This will remove the worktree and delete the branch '{branch}'. Continue?"
        ):
            state.console.print("[dim]Cancelled[/dim]")
            return
        result = manager.remove_worktree(branch)

    _report_removal(state, result)


def _report_removal(state: AppState, result: RemovalResult) -> None:
    if result.warning is not None:
        state.console.print(f"[green]Removed worktree {result.path}[/green]")
        state.console.print(f"[yellow]Warning:[/yellow] {result.warning}")
    else:
        state.console.print(f"[green]Removed worktree and branch: {result.branch}[/green]")


@app.command()
def root(
    ctx: typer.Context,
    json_: bool = typer.Option(False, "--json", help="Output JSON."),
    details: bool = typer.Option(False, "--details", "-d", help="Show project root, main repository and branch."),
    simple: bool = typer.Option(
        False,
        "--simple",
        help="Derive the main repository from the shared git directory only.",
    ),
) -> None:
    """Print the main repository path."""
    state = _require_state(ctx)
    with _exit_on_error(state):
        if simple:
            typer.echo(str(resolve_root_from_common_dir(state.cwd)))
            return
        context = resolve_root(state.cwd, state.settings)

    if json_:
        state.console.print_json(data=context.to_dict())
        return
    if not details:
        typer.echo(str(context.main_repository if context.is_in_worktree else context.current_path))
        return

    state.console.print(f"\n[bold]Project root:[/bold] [green]{context.project_root}[/green]")
    state.console.print(f"[bold]Main repository:[/bold] [green]{context.main_repository}[/green]")
    if context.is_in_worktree and context.current_worktree is not None:
        current = context.current_worktree
        state.console.print(f"[bold]Current worktree:[/bold] [cyan]{current.path}[/cyan]")
        state.console.print(f"[bold]Branch:[/bold] [cyan]{current.branch or '(detached)'}[/cyan]")
        state.console.print("\n[bold]To navigate to main repository:[/bold]")
        state.console.print('  [cyan]cd "$(wtm root)"[/cyan]')
    else:
        state.console.print("\n[dim]You are currently in the main repository[/dim]")


@app.command()
def init(ctx: typer.Context) -> None:
    """Create a lifecycle hook skeleton in the main repository."""
    state = _require_state(ctx)
    with _exit_on_error(state):
        hook = HookRunner(resolve_root_from_common_dir(state.cwd), state.settings)
        path = hook.create()
    state.console.print(f"[green]Created {path.name}[/green]")
    state.console.print(f"\n[bold]Hook file location:[/bold] {path}")
    state.console.print("The hook runs automatically after 'wtm add' in the new worktree.")


__all__ = ["app"]
