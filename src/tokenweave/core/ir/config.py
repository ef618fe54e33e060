"""
Build configuration IR types.

Defines the structure of tokenweave.yaml: where token sources live, how
they are layered, which themes exist and which artifacts each build writes.
Defaults mirror the conventional ``src/tokens`` layout.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .tokens import Target

# Merge priority reserved for theme override layers
THEME_LAYER_PRIORITY = 400


# =============================================================================
# Layers and themes
# =============================================================================


class LayerSpec(BaseModel):
    """A source tier merged at a fixed priority."""

    model_config = ConfigDict(frozen=True)

    name: str
    priority: int = Field(description="Higher priority overrides lower on path collision")
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns relative to tokens_dir",
    )


class ThemeSpec(BaseModel):
    """A named theme; its include globs form the highest-priority layer."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str | None = None
    include: list[str] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name or self.id.capitalize()


def _default_layers() -> list[LayerSpec]:
    return [
        LayerSpec(name="reference", priority=100, include=["reference/**/*.json"]),
        LayerSpec(name="semantic_base", priority=200, include=["semantic/base/**/*.json"]),
        LayerSpec(name="component", priority=300, include=["component/**/*.json"]),
    ]


def _default_themes() -> list[ThemeSpec]:
    return [
        ThemeSpec(id="light", name="Light"),
        ThemeSpec(id="dark", name="Dark", include=["semantic/dark/**/*.json"]),
    ]


# =============================================================================
# Platforms
# =============================================================================


class EmitOptions(BaseModel):
    """Formatting options shared by the emitters."""

    model_config = ConfigDict(frozen=True)

    selector: str = Field(default=":root", description="CSS selector for the base block")
    output_references: bool = Field(
        default=False,
        description="Emit var(--ref) for tokens whose value is a single reference",
    )
    include_tiers: list[str] | None = Field(
        default=None,
        description="Only emit tokens whose first path segment is listed",
    )
    expand_composites: bool = Field(
        default=True,
        description="Expand typography into per-property custom properties",
    )
    include_themes: bool = Field(
        default=True,
        description="Append theme override blocks (CSS only)",
    )


class PlatformSpec(BaseModel):
    """One output artifact."""

    model_config = ConfigDict(frozen=True)

    target: Target
    filename: str
    options: EmitOptions = Field(default_factory=EmitOptions)


def _default_platforms() -> list[PlatformSpec]:
    return [
        PlatformSpec(
            target=Target.CSS,
            filename="css/tokens.css",
            options=EmitOptions(include_tiers=["sys", "cmp"]),
        ),
        PlatformSpec(target=Target.CSS, filename="css/internal-all-tokens.css"),
        PlatformSpec(target=Target.JS, filename="tokens.js"),
        PlatformSpec(target=Target.TYPESCRIPT, filename="tokens.d.ts"),
        PlatformSpec(target=Target.JSON, filename="tokens.json"),
        PlatformSpec(target=Target.DOCS, filename="docs/tokens-reference.json"),
        PlatformSpec(target=Target.MAPPINGS, filename="docs/token-mappings.json"),
    ]


# =============================================================================
# Root
# =============================================================================


class BuildConfig(BaseModel):
    """Complete build configuration."""

    model_config = ConfigDict(frozen=True)

    tokens_dir: str = Field(default="src/tokens")
    output_dir: str = Field(default="dist")
    layers: list[LayerSpec] = Field(default_factory=_default_layers)
    themes: list[ThemeSpec] = Field(default_factory=_default_themes)
    base_theme: str = Field(default="light")
    theme_override_prefix: str = Field(
        default="sys.color",
        description="Only tokens under this path prefix appear in theme override blocks",
    )
    base_font_size: float = Field(default=16, gt=0, description="px per rem")
    rem_to_px: bool = Field(default=True, description="Convert rem to px for CSS")
    max_workers: int = Field(default=8, ge=1, description="Concurrent file reads")
    platforms: list[PlatformSpec] = Field(default_factory=_default_platforms)

    @model_validator(mode="after")
    def _check_themes(self) -> BuildConfig:
        ids = [theme.id for theme in self.themes]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate theme ids: {ids}")
        if self.themes and self.base_theme not in ids:
            raise ValueError(f"base_theme '{self.base_theme}' is not one of {ids}")
        names = [layer.name for layer in self.layers]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate layer names: {names}")
        return self

    def get_theme(self, theme_id: str) -> ThemeSpec | None:
        for theme in self.themes:
            if theme.id == theme_id:
                return theme
        return None

    @property
    def secondary_themes(self) -> list[ThemeSpec]:
        return [theme for theme in self.themes if theme.id != self.base_theme]
