"""
Build pipeline.

Strict stage order, each stage complete before the next begins:

    gather (concurrent file reads) -> normalize -> merge -> resolve (per theme)
    -> theme diff -> transform + emit (in memory) -> write

Every fatal error surfaces before anything is written, so a failed build
never leaves half-updated artifacts behind. Each build constructs fresh
stores; nothing is shared across builds.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from .config_loader import load_config
from .emitters import EmitContext, EmittedArtifact, OutputMappings, get_emitter
from .errors import EmitError, UnsupportedTypeTransformWarning
from .ir import BuildConfig, Target, ThemeSpec
from .loader import load_layers
from .normalize import normalize_layers
from .references import ResolvedTokenSet, resolve
from .store import TokenStore, merge
from .theme_diff import ThemeOverrideSet, diff_themes
from .transforms import TransformOptions

logger = logging.getLogger(__name__)


@dataclass
class ThemeBuild:
    """Merged and resolved tokens for one theme."""

    theme_id: str
    store: TokenStore
    resolved: ResolvedTokenSet


@dataclass
class BuildResult:
    """Everything one build produced."""

    base_theme: str
    themes: dict[str, ThemeBuild] = field(default_factory=dict)
    overrides: dict[str, ThemeOverrideSet] = field(default_factory=dict)
    artifacts: list[EmittedArtifact] = field(default_factory=list)
    mappings: OutputMappings = field(default_factory=OutputMappings)
    diagnostics: list[UnsupportedTypeTransformWarning] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def base(self) -> ThemeBuild:
        return self.themes[self.base_theme]

    @property
    def token_count(self) -> int:
        return len(self.base.resolved)

    def artifact(self, filename: str) -> EmittedArtifact | None:
        for artifact in self.artifacts:
            if artifact.filename == filename:
                return artifact
        return None


# =============================================================================
# Stages
# =============================================================================


def load_store(config: BuildConfig, project_root: Path, theme_id: str | None = None) -> TokenStore:
    """Gather, normalize and merge the layers of one theme."""
    layers = load_layers(config, project_root, theme_id)
    return merge(normalize_layers(layers))


def resolve_theme(config: BuildConfig, project_root: Path, theme_id: str | None) -> ThemeBuild:
    store = load_store(config, project_root, theme_id)
    return ThemeBuild(theme_id=theme_id or "", store=store, resolved=resolve(store))


def _theme_order(config: BuildConfig) -> list[ThemeSpec]:
    base = config.get_theme(config.base_theme)
    return ([base] if base else []) + config.secondary_themes


def _ordered_platforms(config: BuildConfig):
    # The mappings artifact reads what every other emitter recorded
    return sorted(config.platforms, key=lambda platform: platform.target is Target.MAPPINGS)


def _dedupe(
    diagnostics: list[UnsupportedTypeTransformWarning],
) -> list[UnsupportedTypeTransformWarning]:
    seen: set[tuple[str, str, str, str]] = set()
    unique = []
    for warning in diagnostics:
        key = (warning.path, warning.token_type, warning.target, warning.detail)
        if key not in seen:
            seen.add(key)
            unique.append(warning)
    return unique


def emit_artifacts(config: BuildConfig, context: EmitContext) -> list[EmittedArtifact]:
    """Run every configured emitter in memory.

    Raises:
        EmitError: If two platforms share a filename or an emitter fails.
    """
    filenames = [platform.filename for platform in config.platforms]
    duplicates = sorted({name for name in filenames if filenames.count(name) > 1})
    if duplicates:
        raise EmitError(f"Several platforms write the same file: {', '.join(duplicates)}")

    artifacts = []
    for platform in _ordered_platforms(config):
        artifact = get_emitter(platform).emit(context)
        logger.debug(f"Rendered {artifact.filename} ({len(artifact.content)} bytes)")
        artifacts.append(artifact)
    return artifacts


def write_artifacts(artifacts: list[EmittedArtifact], output_dir: Path) -> list[Path]:
    """Write rendered artifacts, skipping files whose content is unchanged.

    Returns:
        Paths actually written.
    """
    written = []
    for artifact in artifacts:
        path = output_dir / artifact.filename
        if path.exists() and path.read_text(encoding="utf-8") == artifact.content:
            logger.debug(f"Unchanged: {path}")
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(artifact.content, encoding="utf-8")
        written.append(path)
        logger.info(f"Wrote {path}")
    return written


# =============================================================================
# Entry points
# =============================================================================


def build_tokens(config: BuildConfig, project_root: Path, *, write: bool = True) -> BuildResult:
    """Run the full pipeline for a project.

    Args:
        config: Build configuration.
        project_root: Directory that tokens_dir and output_dir are relative to.
        write: If False, render artifacts without touching the output directory.

    Returns:
        BuildResult with resolved themes, overrides and artifacts.

    Raises:
        TokenweaveError: On any fatal merge, resolution or emit error.
    """
    started = time.perf_counter()
    themes = _theme_order(config)
    result = BuildResult(base_theme=config.base_theme if themes else "")

    if themes:
        for theme in themes:
            logger.debug(f"Resolving theme '{theme.id}'")
            result.themes[theme.id] = resolve_theme(config, project_root, theme.id)
    else:
        result.themes[""] = resolve_theme(config, project_root, None)

    base = result.base
    for theme in config.secondary_themes:
        result.overrides[theme.id] = diff_themes(
            base.resolved,
            result.themes[theme.id].resolved,
            prefix=config.theme_override_prefix,
            theme_id=theme.id,
            base_id=config.base_theme,
        )

    context = EmitContext(
        tokens=base.resolved,
        transform_options=TransformOptions(
            base_font_size=config.base_font_size,
            rem_to_px=config.rem_to_px,
        ),
        base_theme=config.base_theme,
        themes=themes,
        overrides=result.overrides,
        mappings=result.mappings,
    )
    result.artifacts = emit_artifacts(config, context)
    result.diagnostics = _dedupe(context.diagnostics)

    if write:
        result.written = write_artifacts(result.artifacts, project_root / config.output_dir)

    result.elapsed = time.perf_counter() - started
    logger.info(
        f"Built {len(result.artifacts)} artifacts from {result.token_count} tokens "
        f"in {result.elapsed:.2f}s ({len(result.diagnostics)} warnings)"
    )
    return result


def build_project(
    project_root: Path,
    *,
    config_path: Path | None = None,
    write: bool = True,
) -> BuildResult:
    """Load tokenweave.yaml (or defaults) and build."""
    config = load_config(project_root, config_path=config_path)
    return build_tokens(config, project_root, write=write)
