"""
Token inspection commands: lint, diff and normalize.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.markup import escape
from rich.table import Table

from tokenweave.core.config_loader import load_config
from tokenweave.core.errors import TokenweaveError
from tokenweave.core.lint import RULES, LintResult, lint
from tokenweave.core.loader import IGNORED_FILENAMES
from tokenweave.core.normalize import migrate_file
from tokenweave.core.pipeline import load_store, resolve_theme
from tokenweave.core.theme_diff import diff_themes

from .build import CONFIG_OPTION, PROJECT_OPTION
from .utils import console, fail, resolve_project


def _show(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value, sort_keys=True)


def lint_command(
    project: str = PROJECT_OPTION,
    config: str | None = CONFIG_OPTION,
    rule: list[str] | None = typer.Option(
        None, "--rule", "-r", help=f"Only run these rules ({', '.join(RULES)})"
    ),
) -> None:
    """
    Check token sources against naming, typing and reference rules.
    """
    root, config_path = resolve_project(project, config)
    try:
        build_config = load_config(root, config_path=config_path)
        theme_ids: list[str | None] = [theme.id for theme in build_config.themes] or [None]
        result = LintResult()
        for theme_id in theme_ids:
            result.extend(lint(load_store(build_config, root, theme_id), rule or None))
    except (TokenweaveError, ValueError) as e:
        fail(str(e))

    for issue in result.errors:
        console.print(f"[red]error[/red]   {escape(str(issue))}")
    for issue in result.warnings:
        console.print(f"[yellow]warning[/yellow] {escape(str(issue))}")

    if not result.is_valid:
        console.print(f"[red]✗[/red] {len(result.errors)} errors, {len(result.warnings)} warnings")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] No errors ({len(result.warnings)} warnings)")


def diff_command(
    theme: str | None = typer.Argument(None, help="Theme to compare (default: all non-base themes)"),
    project: str = PROJECT_OPTION,
    config: str | None = CONFIG_OPTION,
    prefix: str | None = typer.Option(
        None, "--prefix", help="Path prefix to compare (default: theme_override_prefix)"
    ),
    all_tokens: bool = typer.Option(False, "--all", help="Compare every token, ignoring the prefix"),
) -> None:
    """
    Show the tokens a theme overrides relative to the base theme.
    """
    root, config_path = resolve_project(project, config)
    try:
        build_config = load_config(root, config_path=config_path)
        if theme is not None and build_config.get_theme(theme) is None:
            fail(f"Unknown theme '{theme}'")
        targets = [theme] if theme else [t.id for t in build_config.secondary_themes]
        if not targets:
            console.print("No secondary themes configured")
            return

        base = resolve_theme(build_config, root, build_config.base_theme)
        scope = None if all_tokens else (prefix or build_config.theme_override_prefix)
        for theme_id in targets:
            resolved = resolve_theme(build_config, root, theme_id)
            overrides = diff_themes(
                base.resolved,
                resolved.resolved,
                prefix=scope,
                theme_id=theme_id,
                base_id=build_config.base_theme,
            )
            table = Table(
                title=f"{theme_id} vs {build_config.base_theme} ({len(overrides)} overrides)",
                show_header=True,
                header_style="bold",
            )
            table.add_column("Token")
            table.add_column(build_config.base_theme)
            table.add_column(theme_id)
            for override in overrides:
                base_value = "(new)" if override.is_new else _show(override.base_value)
                table.add_row(override.path, escape(base_value), escape(_show(override.value)))
            console.print(table)
    except TokenweaveError as e:
        fail(str(e))


def normalize_command(
    project: str = PROJECT_OPTION,
    config: str | None = CONFIG_OPTION,
    write: bool = typer.Option(False, "--write", "-w", help="Rewrite files in place"),
) -> None:
    """
    Migrate legacy numeric font-weight keys (400 -> regular) and their references.
    """
    root, config_path = resolve_project(project, config)
    try:
        build_config = load_config(root, config_path=config_path)
        tokens_dir = root / build_config.tokens_dir
        if not tokens_dir.is_dir():
            fail(f"Tokens directory not found: {tokens_dir}")
        files = sorted(
            path for path in tokens_dir.rglob("*.json") if path.name not in IGNORED_FILENAMES
        )
        reports = [migrate_file(path, write=write) for path in files]
    except TokenweaveError as e:
        fail(str(e))

    changed = [report for report in reports if report.changed]
    if not changed:
        console.print("[green]✓[/green] All token files are already normalized")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("File")
    table.add_column("Change")
    for report in changed:
        name = Path(report.file).relative_to(tokens_dir).as_posix()
        for old, new in report.renamed_keys:
            table.add_row(name, f"{old} -> {new}")
        for old, new in report.rewritten_references:
            table.add_row(name, f"{old} -> {new}")
    console.print(table)

    if write:
        console.print(f"[green]✓[/green] Rewrote {len(changed)} files")
    else:
        console.print(f"{len(changed)} files need migration; run with --write to apply")
