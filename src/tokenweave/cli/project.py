"""
Project setup commands.
"""

from __future__ import annotations

import typer

from tokenweave.core.config_loader import CONFIG_FILE, load_config, scaffold_config

from .utils import console, resolve_project


def init_command(
    project: str = typer.Option(".", "--project", "-p", help="Project root directory"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
) -> None:
    """
    Create a default tokenweave.yaml and the token source directories.
    """
    root, _ = resolve_project(project, None)
    root.mkdir(parents=True, exist_ok=True)

    path = scaffold_config(root, overwrite=force)
    if path is None:
        console.print(f"{CONFIG_FILE} already exists (use --force to overwrite)")
        return
    console.print(f"[green]✓[/green] Created {path}")

    config = load_config(root, config_path=path)
    tokens_dir = root / config.tokens_dir
    for layer_dir in ("reference", "semantic/base", "semantic/dark", "component"):
        (tokens_dir / layer_dir).mkdir(parents=True, exist_ok=True)
    console.print(f"  Token sources: {tokens_dir}")
