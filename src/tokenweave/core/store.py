"""
Token Store: merge layered token sources into one flat path -> Token mapping.

Layers are applied in ascending priority; a higher-priority layer silently
overrides a lower one on path collision. Within a single layer, files are
applied in lexicographic path order and two files defining the same path
with different values is a ``DuplicateDefinitionConflict``.

The merge performs no I/O. Every contributing definition is tracked so a
build can explain where a token's winning value came from.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from .errors import DuplicateDefinitionConflict
from .ir import LayerSource, Token
from .loader import iter_tokens

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeSource:
    """One definition of a path contributed by a source file."""

    path: str
    file: str
    layer: str
    priority: int
    value: Any


@dataclass
class ValueConflict:
    """A path defined with differing values across layers."""

    path: str
    sources: list[MergeSource]


@dataclass
class MergeAnalysis:
    """Summary of how a merge resolved its inputs."""

    total_tokens: int = 0
    single_source: int = 0
    multiple_sources: int = 0
    conflicts: list[ValueConflict] = field(default_factory=list)
    by_layer: dict[str, int] = field(default_factory=dict)
    by_file: dict[str, int] = field(default_factory=dict)


@dataclass
class TokenStore:
    """Flat mapping of dotted path to the winning token definition."""

    tokens: dict[str, Token] = field(default_factory=dict)
    sources: dict[str, list[MergeSource]] = field(default_factory=dict)

    def __contains__(self, path: object) -> bool:
        return path in self.tokens

    def __getitem__(self, path: str) -> Token:
        return self.tokens[path]

    def __len__(self) -> int:
        return len(self.tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens.values())

    def get(self, path: str) -> Token | None:
        return self.tokens.get(path)

    def paths(self) -> list[str]:
        return list(self.tokens)

    def winning_source(self, path: str) -> MergeSource | None:
        """The highest-priority source for a path; later files win ties."""
        candidates = self.sources.get(path)
        if not candidates:
            return None
        best = candidates[0]
        for source in candidates[1:]:
            if source.priority >= best.priority:
                best = source
        return best

    def analyze(self) -> MergeAnalysis:
        analysis = MergeAnalysis(total_tokens=len(self.sources))
        for path, sources in self.sources.items():
            if len(sources) == 1:
                analysis.single_source += 1
            else:
                analysis.multiple_sources += 1
                first = sources[0].value
                if any(source.value != first for source in sources[1:]):
                    analysis.conflicts.append(ValueConflict(path=path, sources=list(sources)))

            for source in sources:
                analysis.by_layer[source.layer] = analysis.by_layer.get(source.layer, 0) + 1
                analysis.by_file[source.file] = analysis.by_file.get(source.file, 0) + 1
        return analysis


def merge(layers: list[LayerSource]) -> TokenStore:
    """Merge ordered layers into a TokenStore.

    Args:
        layers: Layer sources. Sorted by priority here (stable for equal
            priorities); files inside each layer are sorted by path.

    Returns:
        TokenStore whose tokens are keyed in lexicographic path order.

    Raises:
        DuplicateDefinitionConflict: Same-layer definitions of one path disagree.
    """
    merged: dict[str, Token] = {}
    sources: dict[str, list[MergeSource]] = {}

    for layer in sorted(layers, key=lambda item: item.priority):
        layer_tokens: dict[str, Token] = {}

        for source_file in sorted(layer.files, key=lambda item: item.path):
            for token in iter_tokens(source_file, layer):
                existing = layer_tokens.get(token.path)
                if existing is not None and existing.value != token.value:
                    files = [existing.source.file if existing.source else "?", source_file.path]
                    raise DuplicateDefinitionConflict(token.path, layer.name, files)

                layer_tokens[token.path] = token
                sources.setdefault(token.path, []).append(
                    MergeSource(
                        path=token.path,
                        file=source_file.path,
                        layer=layer.name,
                        priority=layer.priority,
                        value=token.value,
                    )
                )

        overridden = sum(1 for path in layer_tokens if path in merged)
        merged.update(layer_tokens)
        logger.debug(
            f"Layer '{layer.name}' (priority {layer.priority}): "
            f"{len(layer_tokens)} tokens, {overridden} overrides"
        )

    store = TokenStore(
        tokens={path: merged[path] for path in sorted(merged)},
        sources={path: sources[path] for path in sorted(sources)},
    )
    logger.info(f"Merged {len(store)} tokens from {len(layers)} layers")
    return store


def analyze_merge(store: TokenStore) -> MergeAnalysis:
    """Report how many paths were overridden across layers and with what."""
    return store.analyze()
