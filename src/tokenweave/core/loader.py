"""
Token source loading.

Reads DTCG JSON token files from disk and turns token trees into flat
``Token`` definitions. File reads run concurrently; results always come
back in canonical order (lexicographic relative path) so the merge that
follows is reproducible regardless of which read finished first.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from .errors import MalformedSourceFileError
from .ir import (
    THEME_LAYER_PRIORITY,
    BuildConfig,
    LayerSource,
    LayerSpec,
    SourceFile,
    Token,
    TokenSource,
    TokenType,
)

logger = logging.getLogger(__name__)

# Theme manifests exported by design tools, never token sources
IGNORED_FILENAMES = frozenset({"$themes.json", "$metadata.json"})

_TOKEN_KEYS = frozenset({"$value", "$type", "$description", "$deprecated", "$extensions"})


# =============================================================================
# File discovery and reading
# =============================================================================


def discover_files(tokens_dir: Path, patterns: list[str]) -> list[Path]:
    """Find files matching glob patterns, sorted by relative POSIX path."""
    found: dict[str, Path] = {}
    for pattern in patterns:
        for path in tokens_dir.glob(pattern):
            if not path.is_file() or path.name in IGNORED_FILENAMES:
                continue
            found[path.relative_to(tokens_dir).as_posix()] = path
    return [found[key] for key in sorted(found)]


def read_source_file(path: Path, tokens_dir: Path | None = None) -> SourceFile:
    """Read and parse one JSON token file.

    Raises:
        MalformedSourceFileError: If the file is unreadable, not JSON, or not an object.
    """
    relative = path.relative_to(tokens_dir).as_posix() if tokens_dir else path.as_posix()
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MalformedSourceFileError(f"Cannot read token file: {e}", relative) from e

    try:
        tree = json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedSourceFileError(
            f"Invalid JSON at line {e.lineno} column {e.colno}: {e.msg}", relative
        ) from e

    if not isinstance(tree, dict):
        raise MalformedSourceFileError(
            f"Token file must contain a JSON object, got {type(tree).__name__}", relative
        )

    logger.debug(f"Read {relative}")
    return SourceFile(path=relative, tree=tree)


def read_source_files(
    paths: list[Path],
    tokens_dir: Path | None = None,
    *,
    max_workers: int = 8,
) -> list[SourceFile]:
    """Read files concurrently, returning results in the order of ``paths``.

    The first failure propagates; no partial result is returned.
    """
    if len(paths) <= 1:
        return [read_source_file(path, tokens_dir) for path in paths]

    with ThreadPoolExecutor(max_workers=min(max_workers, len(paths))) as executor:
        futures = [executor.submit(read_source_file, path, tokens_dir) for path in paths]
        return [future.result() for future in futures]


def load_layer(
    tokens_dir: Path,
    layer: LayerSpec,
    *,
    theme: str | None = None,
    max_workers: int = 8,
) -> LayerSource:
    """Discover and read every file belonging to one layer."""
    paths = discover_files(tokens_dir, layer.include)
    if not paths and layer.include:
        logger.warning(f"Layer '{layer.name}' matched no files under {tokens_dir}")
    files = read_source_files(paths, tokens_dir, max_workers=max_workers)
    return LayerSource(name=layer.name, priority=layer.priority, files=files, theme=theme)


def load_layers(
    config: BuildConfig,
    project_root: Path,
    theme_id: str | None = None,
) -> list[LayerSource]:
    """Load the configured layers, plus the theme layer for ``theme_id``.

    Returns:
        Layers in ascending priority order.
    """
    tokens_dir = project_root / config.tokens_dir
    layers = [
        load_layer(tokens_dir, spec, max_workers=config.max_workers) for spec in config.layers
    ]

    if theme_id is not None:
        theme = config.get_theme(theme_id)
        if theme is None:
            raise ValueError(f"Unknown theme '{theme_id}'")
        if theme.include:
            theme_layer = LayerSpec(
                name=f"theme:{theme.id}",
                priority=THEME_LAYER_PRIORITY,
                include=theme.include,
            )
            layers.append(
                load_layer(
                    tokens_dir, theme_layer, theme=theme.id, max_workers=config.max_workers
                )
            )

    return sorted(layers, key=lambda layer: layer.priority)


# =============================================================================
# Token tree parsing
# =============================================================================


def is_token_node(node: Any) -> bool:
    """A token is an object carrying ``$value``; everything else is a group."""
    return isinstance(node, dict) and "$value" in node


def iter_tokens(source: SourceFile, layer: LayerSource) -> Iterator[Token]:
    """Yield every token defined in a source file, in document order.

    Group ``$type`` values are inherited by descendants without their own.
    """
    origin = TokenSource(
        file=source.path,
        layer=layer.name,
        priority=layer.priority,
        theme=layer.theme,
    )
    yield from _walk(source.tree, [], None, origin)


def _walk(
    node: dict[str, Any],
    prefix: list[str],
    inherited_type: str | None,
    origin: TokenSource,
) -> Iterator[Token]:
    group_type = node.get("$type", inherited_type)

    for key, child in node.items():
        if key.startswith("$"):
            continue

        path = [*prefix, key]
        dotted = ".".join(path)

        if "." in key or "{" in key or "}" in key:
            raise MalformedSourceFileError(
                f"Invalid token or group name '{key}' at '{dotted}'", origin.file
            )

        if is_token_node(child):
            yield _make_token(dotted, child, group_type, origin)
        elif isinstance(child, dict):
            yield from _walk(child, path, group_type, origin)
        else:
            raise MalformedSourceFileError(
                f"Expected a token or group at '{dotted}', got {type(child).__name__}",
                origin.file,
            )


def _make_token(
    path: str,
    node: dict[str, Any],
    inherited_type: str | None,
    origin: TokenSource,
) -> Token:
    nested = [key for key in node if not key.startswith("$") and isinstance(node[key], dict)]
    if nested:
        raise MalformedSourceFileError(
            f"Token '{path}' cannot contain nested groups: {', '.join(nested)}", origin.file
        )

    unknown = [key for key in node if key.startswith("$") and key not in _TOKEN_KEYS]
    if unknown:
        logger.debug(f"{origin.file}: ignoring {', '.join(unknown)} on '{path}'")

    raw_type = node.get("$type", inherited_type)
    token_type = TokenType.parse(raw_type)
    if raw_type is not None and token_type is TokenType.OTHER and raw_type != "other":
        logger.warning(f"{origin.file}: unknown $type '{raw_type}' on '{path}', treating as other")

    description = node.get("$description")
    deprecated = node.get("$deprecated")
    extensions = node.get("$extensions")

    return Token(
        path=path,
        type=token_type,
        value=node["$value"],
        description=description if isinstance(description, str) else None,
        deprecated=deprecated if isinstance(deprecated, bool | str) else None,
        extensions=extensions if isinstance(extensions, dict) else {},
        source=origin,
    )
