"""
Build and watch commands.
"""

from __future__ import annotations

import time

import typer
from rich.markup import escape
from rich.table import Table

from tokenweave.core.errors import TokenweaveError
from tokenweave.core.pipeline import BuildResult, build_project
from tokenweave.core.watch import start_watch

from .utils import console, fail, resolve_project

PROJECT_OPTION = typer.Option(".", "--project", "-p", help="Project root directory")
CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Config file (default: tokenweave.yaml)")


def print_build_summary(result: BuildResult, *, dry_run: bool = False) -> None:
    table = Table(title="Artifacts", show_header=True, header_style="bold")
    table.add_column("File")
    table.add_column("Target")
    table.add_column("Bytes", justify="right")
    written = {path.as_posix() for path in result.written}
    for artifact in result.artifacts:
        changed = dry_run or any(w.endswith("/" + artifact.filename) for w in written)
        status = "" if changed else " (unchanged)"
        table.add_row(artifact.filename + status, str(artifact.target), str(len(artifact.content)))
    console.print(table)

    for theme_id, overrides in result.overrides.items():
        console.print(f"Theme [bold]{theme_id}[/bold]: {len(overrides)} overrides")
    for warning in result.diagnostics:
        console.print(f"[yellow]warning[/yellow] {escape(str(warning))}")

    verb = "Rendered" if dry_run else "Built"
    console.print(
        f"[green]✓[/green] {verb} {result.token_count} tokens into "
        f"{len(result.artifacts)} artifacts in {result.elapsed:.2f}s"
    )


def build_command(
    project: str = PROJECT_OPTION,
    config: str | None = CONFIG_OPTION,
    dry_run: bool = typer.Option(False, "--dry-run", help="Render without writing files"),
) -> None:
    """
    Build every configured artifact from the token sources.
    """
    root, config_path = resolve_project(project, config)
    try:
        result = build_project(root, config_path=config_path, write=not dry_run)
    except TokenweaveError as e:
        fail(str(e))
    print_build_summary(result, dry_run=dry_run)


def watch_command(
    project: str = PROJECT_OPTION,
    config: str | None = CONFIG_OPTION,
    interval: float = typer.Option(0.5, "--interval", "-i", help="Poll interval in seconds"),
) -> None:
    """
    Rebuild whenever token sources or the config change.
    """
    root, config_path = resolve_project(project, config)

    def on_success(result: BuildResult) -> None:
        console.print(
            f"[green]✓[/green] Rebuilt {result.token_count} tokens "
            f"({len(result.written)} files changed)"
        )

    def on_error(error: TokenweaveError) -> None:
        console.print(f"[red]✗ Build failed:[/red] {escape(str(error))}")

    try:
        watcher, scheduler = start_watch(
            root,
            lambda: build_project(root, config_path=config_path),
            config_path=config_path,
            poll_interval=interval,
            on_success=on_success,
            on_error=on_error,
        )
    except TokenweaveError as e:
        fail(str(e))

    console.print(f"Watching {root} (Ctrl+C to stop)")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("Stopping watcher")
    finally:
        watcher.stop()
        scheduler.wait_idle(timeout=10)
