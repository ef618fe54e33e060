"""
Legacy font-weight normalization.

Older token sets keyed font weights numerically (``ref.fontWeight.400``).
The canonical form uses semantic names (``ref.fontWeight.regular``). This
pass runs over raw token trees before merge and is idempotent: a tree that
is already normalized comes back unchanged.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .ir import LayerSource, SourceFile

logger = logging.getLogger(__name__)

FONT_WEIGHT_GROUP = "fontWeight"

# Numeric weight key -> semantic name
LEGACY_FONT_WEIGHT_NAMES: dict[str, str] = {
    "400": "regular",
    "500": "medium",
    "600": "semi-bold",
    "700": "bold",
}

_LEGACY_REFERENCE = re.compile(
    r"\{((?:[^{}.]+\.)*" + FONT_WEIGHT_GROUP + r")\.(" + "|".join(LEGACY_FONT_WEIGHT_NAMES) + r")\}"
)


@dataclass
class NormalizationReport:
    """Changes applied to one source file."""

    file: str
    renamed_keys: list[tuple[str, str]] = field(default_factory=list)
    rewritten_references: list[tuple[str, str]] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.renamed_keys or self.rewritten_references)


def normalize_tree(tree: dict[str, Any], report: NormalizationReport | None = None) -> dict[str, Any]:
    """Return a copy of ``tree`` with legacy font-weight keys and references migrated."""
    return _normalize_node(tree, [], report)


def _normalize_node(
    node: Any,
    path: list[str],
    report: NormalizationReport | None,
) -> Any:
    if isinstance(node, str):
        return _rewrite_references(node, report)
    if isinstance(node, list):
        return [_normalize_node(item, path, report) for item in node]
    if not isinstance(node, dict):
        return node

    in_weight_group = bool(path) and path[-1] == FONT_WEIGHT_GROUP
    result: dict[str, Any] = {}
    for key, child in node.items():
        new_key = key
        new_child = _normalize_node(child, [*path, key], report)

        if in_weight_group and key in LEGACY_FONT_WEIGHT_NAMES:
            semantic = LEGACY_FONT_WEIGHT_NAMES[key]
            if semantic in node:
                logger.debug(f"'{'.'.join([*path, semantic])}' already defined, dropping '{key}'")
                continue
            new_key = semantic
            if isinstance(new_child, dict) and new_child.get("$value") in (key, int(key)):
                new_child = {**new_child, "$value": semantic}
            if report is not None:
                report.renamed_keys.append((".".join([*path, key]), ".".join([*path, semantic])))

        result[new_key] = new_child
    return result


def _rewrite_references(value: str, report: NormalizationReport | None) -> str:
    def replace(match: re.Match[str]) -> str:
        new = "{" + f"{match.group(1)}.{LEGACY_FONT_WEIGHT_NAMES[match.group(2)]}" + "}"
        if report is not None:
            report.rewritten_references.append((match.group(0), new))
        return new

    return _LEGACY_REFERENCE.sub(replace, value)


def normalize_source(source: SourceFile) -> tuple[SourceFile, NormalizationReport]:
    report = NormalizationReport(file=source.path)
    tree = normalize_tree(source.tree, report)
    if report.changed:
        logger.info(
            f"Normalized {source.path}: {len(report.renamed_keys)} keys, "
            f"{len(report.rewritten_references)} references"
        )
        return SourceFile(path=source.path, tree=tree), report
    return source, report


def normalize_layers(layers: list[LayerSource]) -> list[LayerSource]:
    """Apply the migration to every file of every layer before merge."""
    normalized: list[LayerSource] = []
    for layer in layers:
        files = [normalize_source(source)[0] for source in layer.files]
        normalized.append(layer.model_copy(update={"files": files}))
    return normalized


def migrate_file(path: Path, *, write: bool = False) -> NormalizationReport:
    """Normalize a token file on disk, rewriting it when ``write`` is set."""
    from .loader import read_source_file

    source = read_source_file(path)
    updated, report = normalize_source(source)
    if write and report.changed:
        path.write_text(json.dumps(updated.tree, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        logger.info(f"Rewrote {path}")
    return report
