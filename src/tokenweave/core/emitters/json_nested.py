"""
Nested JSON emitter.

Rebuilds the dotted-path hierarchy as a nested object tree whose leaves are
JSON-transformed values.
"""

from __future__ import annotations

import json
from typing import Any

from ..errors import EmitError
from ..ir import Target
from ..naming import js_path
from .base import EmitContext, Emitter


def set_nested(tree: dict[str, Any], path: str, value: Any, branches: set[int]) -> None:
    """Place ``value`` at ``path``, creating intermediate objects.

    ``branches`` holds the ids of objects created here as groups, so a dict
    leaf value is never mistaken for a group.

    Raises:
        EmitError: If the path is both a token and a group.
    """
    segments = path.split(".")
    node = tree
    for depth, segment in enumerate(segments[:-1]):
        child = node.get(segment)
        if child is None:
            child = {}
            branches.add(id(child))
            node[segment] = child
        elif id(child) not in branches:
            prefix = ".".join(segments[: depth + 1])
            raise EmitError(f"'{prefix}' is a token but '{path}' needs it to be a group")
        node = child

    leaf = segments[-1]
    if leaf in node:
        raise EmitError(f"'{path}' is a group but is also defined as a token")
    node[leaf] = value


def nested_tree(paths_values: list[tuple[str, Any]]) -> dict[str, Any]:
    tree: dict[str, Any] = {}
    branches: set[int] = set()
    for path, value in paths_values:
        set_nested(tree, path, value, branches)
    return tree


class JsonNestedEmitter(Emitter):
    """Nested JSON tree of resolved, transformed values."""

    target = Target.JSON
    format_name = "json"

    def render(self, context: EmitContext) -> str:
        transformed = context.transformed(self.select(context.tokens), Target.JSON)
        items: list[tuple[str, Any]] = []
        for item in transformed:
            items.append((item.path, item.value))
            context.mappings.record(item.path, self.format_name, js_path(item.path), self.filename)
        return json.dumps(nested_tree(items), indent=2, ensure_ascii=False) + "\n"
