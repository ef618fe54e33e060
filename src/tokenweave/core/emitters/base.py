"""
Base classes for format emitters.

An emitter renders one text artifact from the resolved token set of a build.
Emitters never touch the filesystem: they return ``EmittedArtifact`` objects
and the pipeline writes them once every emitter has succeeded.

Cross-format identifiers are recorded into an ``OutputMappings`` accumulator
that is passed in with the context and returned with the build result, so
concurrent builds never share mapping state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar

from ..errors import UnsupportedTypeTransformWarning
from ..ir import PlatformSpec, Target, ThemeSpec
from ..references import ResolvedTokenSet
from ..theme_diff import ThemeOverrideSet
from ..transforms import TransformedTokenSet, TransformOptions, transform_all

GENERATED_HEADER = "/**\n * Do not edit directly, this file was auto-generated.\n */\n"


@dataclass(frozen=True)
class EmittedArtifact:
    """A rendered output file, relative to the build's output directory."""

    filename: str
    content: str
    target: Target


class OutputMappings:
    """
    Accumulates where each token ends up: path -> format -> identifier + file.

    Example:
        mappings.record("sys.color.primary", "css", "--sys-color-primary", "css/tokens.css")
        mappings.get("sys.color.primary")
        # {"css": {"name": "--sys-color-primary", "file": "css/tokens.css"}}
    """

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, dict[str, str]]] = {}

    def record(self, path: str, format_name: str, identifier: str, file: str) -> None:
        self._entries.setdefault(path, {})[format_name] = {"name": identifier, "file": file}

    def get(self, path: str) -> dict[str, dict[str, str]]:
        return dict(self._entries.get(path, {}))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def to_dict(self) -> dict[str, dict[str, dict[str, str]]]:
        """Sorted copy suitable for deterministic serialization."""
        return {
            path: {fmt: dict(self._entries[path][fmt]) for fmt in sorted(self._entries[path])}
            for path in sorted(self._entries)
        }


@dataclass
class EmitContext:
    """Everything an emitter may read for one build."""

    tokens: ResolvedTokenSet
    transform_options: TransformOptions = field(default_factory=TransformOptions)
    base_theme: str = "light"
    themes: list[ThemeSpec] = field(default_factory=list)
    overrides: dict[str, ThemeOverrideSet] = field(default_factory=dict)
    mappings: OutputMappings = field(default_factory=OutputMappings)
    diagnostics: list[UnsupportedTypeTransformWarning] = field(default_factory=list)

    def transformed(self, tokens: ResolvedTokenSet, target: Target) -> TransformedTokenSet:
        """Transform a token set, folding warnings into the build diagnostics."""
        result = transform_all(tokens, target, self.transform_options)
        self.diagnostics.extend(result.diagnostics)
        return result


class Emitter(ABC):
    """Base class for all emitters; one instance per configured platform."""

    target: ClassVar[Target]
    format_name: ClassVar[str]

    def __init__(self, platform: PlatformSpec):
        self.platform = platform
        self.options = platform.options

    @property
    def filename(self) -> str:
        return self.platform.filename

    @abstractmethod
    def render(self, context: EmitContext) -> str:
        """Render the artifact text."""
        pass

    def emit(self, context: EmitContext) -> EmittedArtifact:
        return EmittedArtifact(filename=self.filename, content=self.render(context), target=self.target)

    def select(self, tokens: ResolvedTokenSet) -> ResolvedTokenSet:
        """Apply the platform's tier filter."""
        tiers = self.options.include_tiers
        if tiers is None:
            return tokens
        return ResolvedTokenSet({token.path: token for token in tokens if token.tier in tiers})
