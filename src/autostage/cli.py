"""autostage CLI — Typer application with add, status, and init commands."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from autostage import __version__

app = typer.Typer(
    name="autostage",
    help="Stage newly created files in a git working tree automatically.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)


def _configure_logging(verbose: bool, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logger = logging.getLogger("autostage")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=console, show_path=debug, markup=False))
    logger.setLevel(level)


def _find_repo_root() -> Optional[Path]:
    from autostage.git.locator import RepoLocator

    root = RepoLocator().find_root(str(Path.cwd()))
    return Path(root) if root else None


def _config_root() -> Path:
    """Repo root of the working directory, or the working directory itself."""
    return _find_repo_root() or Path.cwd()


def _resolve_repo_root() -> Path:
    """Find the git repo root of the working directory, exit 2 on failure."""
    root = _find_repo_root()
    if root is None:
        console.print(
            f"[bold red]Error:[/bold red] not inside a git repository: {escape(str(Path.cwd()))}"
        )
        raise typer.Exit(code=2)
    return root


def _load(config: Optional[str]):
    from autostage.config.loader import ConfigError, load_config

    try:
        return load_config(_config_root(), config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc


# ── add ───────────────────────────────────────────────────────────────────────


@app.command()
def add(
    paths: List[str] = typer.Argument(..., help="Files to stage if they are new"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .autostage.toml"),
    delay: Optional[int] = typer.Option(None, "--delay", help="Debounce delay in ms (overrides config)"),
) -> None:
    """Stage the given files if they pass the policy and are not tracked yet."""
    from autostage.config.loader import ConfigError, validate
    from autostage.engine import Engine
    from autostage.output import terminal

    cfg = _load(config)
    if delay is not None:
        cfg.stage.delay_ms = delay
        try:
            validate(cfg)
        except ConfigError as exc:
            console.print(f"[bold red]Invalid delay:[/bold red] {escape(str(exc))}")
            raise typer.Exit(code=2) from exc

    results: List[Tuple[str, bool, str]] = []
    skipped: List[Tuple[str, str]] = []

    def on_result(path: str, success: bool, message: str) -> None:
        results.append((path, success, message))

    async def run() -> None:
        engine = Engine(cfg, on_result=on_result)
        for p in paths:
            engine.request_add(p)
        await engine.wait_idle()

        reported = {path for path, _, _ in results}
        for p in paths:
            abs_path = os.path.abspath(p)
            if abs_path in reported:
                continue
            snapshot = engine.get_status(abs_path)
            skipped.append((abs_path, snapshot.reason if not snapshot.would_process else "already tracked"))
        engine.cleanup()

    asyncio.run(run())
    terminal.render_results(results, skipped, console=console)

    if any(not ok for _, ok, _ in results):
        raise typer.Exit(code=1)


# ── status ────────────────────────────────────────────────────────────────────


@app.command()
def status(
    path: str = typer.Argument(..., help="File to inspect"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .autostage.toml"),
    format: str = typer.Option("terminal", "--format", "-f", help="Output format: terminal | json"),
) -> None:
    """Show how autostage would treat PATH, without staging anything."""
    from autostage.engine import Engine
    from autostage.output import json_report, terminal

    if format not in ("terminal", "json"):
        console.print(f"[bold red]Invalid format:[/bold red] {escape(format)}")
        raise typer.Exit(code=2)

    cfg = _load(config)
    engine = Engine(cfg)
    snapshot = engine.get_status(path)
    vcs = asyncio.run(engine.file_status(path)) if snapshot.in_git_repo else None

    if format == "json":
        print(json_report.render(snapshot, vcs))
    else:
        terminal.render_status(snapshot, vcs, console=console)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .autostage.toml in the repo root."""
    from autostage.config.defaults import DEFAULT_TOML

    repo_root = _resolve_repo_root()
    config_path = repo_root / ".autostage.toml"

    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  .autostage.toml already exists at {escape(str(config_path))}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {escape(str(config_path))}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"autostage {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output"),
) -> None:
    """autostage — stage new files as soon as they are written."""
    _configure_logging(verbose, debug)
