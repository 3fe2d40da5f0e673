"""Rich terminal reporter — status table and per-file staging results."""

from __future__ import annotations

from typing import List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from autostage.engine import StatusSnapshot
from autostage.git.models import VcsResult


def _yes_no(value: bool) -> Text:
    return Text("yes", style="green") if value else Text("no", style="red")


def render_status(
    snapshot: StatusSnapshot,
    vcs: Optional[VcsResult] = None,
    *,
    console: Optional[Console] = None,
) -> None:
    """Print the status snapshot for one path."""
    console = console or Console(stderr=True)

    table = Table(title="autostage status", show_header=False, title_style="bold", border_style="dim")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Enabled", _yes_no(snapshot.enabled))
    table.add_row("File", Text(snapshot.path))
    table.add_row("In git repo", _yes_no(snapshot.in_git_repo))
    if snapshot.in_git_repo:
        table.add_row("Git root", Text(snapshot.git_root or "unknown"))
        table.add_row("Relative path", Text(snapshot.relative_path or "unknown"))
    if vcs is not None and vcs.status_code is not None:
        table.add_row("Git status", Text(vcs.status_code))
    table.add_row("Would process", _yes_no(snapshot.would_process))
    if not snapshot.would_process:
        table.add_row("Reason", Text(snapshot.reason, style="yellow"))

    console.print(table)


def render_results(
    results: List[Tuple[str, bool, str]],
    skipped: List[Tuple[str, str]],
    *,
    console: Optional[Console] = None,
) -> None:
    """Print one line per finished staging attempt, then the skipped paths."""
    console = console or Console(stderr=True)

    for path, success, message in results:
        if success:
            console.print(f"[green]✓[/green] {escape(path)}")
        else:
            console.print(f"[red]✗[/red] {escape(path)}: {escape(message)}")
    for path, reason in skipped:
        console.print(f"[dim]- {escape(path)} ({escape(reason)})[/dim]")

    added = sum(1 for _, ok, _ in results if ok)
    console.print()
    console.print(f"[dim]Staged:[/dim]   {added}")
    console.print(f"[dim]Failed:[/dim]   {len(results) - added}")
    console.print(f"[dim]Skipped:[/dim]  {len(skipped)}")
