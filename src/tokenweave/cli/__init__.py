"""
tokenweave CLI.

Commands:
- build: merge, resolve and emit every configured artifact
- watch: rebuild on source changes
- lint: check token sources against the lint rules
- diff: show theme overrides relative to the base theme
- normalize: migrate legacy numeric font-weight keys
- init: scaffold tokenweave.yaml
"""

from __future__ import annotations

import typer

from tokenweave._version import get_version

from .build import build_command, watch_command
from .project import init_command
from .tokens import diff_command, lint_command, normalize_command
from .utils import configure_logging, version_callback

__version__ = get_version()

app = typer.Typer(
    help="""tokenweave – design-token resolution and multi-target code generation

Command Types:
  • Project Setup: init
  • Build: build, watch
  • Inspection: lint, diff, normalize
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """tokenweave CLI main callback for global options."""
    configure_logging(verbose)


app.command(name="init")(init_command)
app.command(name="build")(build_command)
app.command(name="watch")(watch_command)
app.command(name="lint")(lint_command)
app.command(name="diff")(diff_command)
app.command(name="normalize")(normalize_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


__all__ = ["__version__", "app", "main"]
