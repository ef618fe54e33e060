"""
TypeScript declarations for the flat JS module.

Each token becomes a readonly property typed with its literal value, or a
structural type for composite values.
"""

from __future__ import annotations

import json
import re
from typing import Any

from ..ir import Target
from .base import GENERATED_HEADER, EmitContext, Emitter
from .js_module import flat_tokens

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def _key(name: str) -> str:
    return name if _IDENTIFIER.match(name) else json.dumps(name)


def _element_type(item: Any, indent: int) -> str:
    if isinstance(item, bool):
        return "boolean"
    if isinstance(item, str):
        return "string"
    if isinstance(item, int | float):
        return "number"
    return ts_type(item, indent)


def ts_type(value: Any, indent: int = 1) -> str:
    """TypeScript type expression for a JSON value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, int | float):
        return json.dumps(value)
    if value is None:
        return "null"
    if isinstance(value, list):
        members = sorted({_element_type(item, indent) for item in value})
        if not members:
            return "readonly never[]"
        union = members[0] if len(members) == 1 else f"({' | '.join(members)})"
        return f"readonly {union}[]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        pad = "  " * (indent + 1)
        lines = [f"{pad}readonly {_key(k)}: {ts_type(v, indent + 1)};" for k, v in value.items()]
        return "{\n" + "\n".join(lines) + "\n" + "  " * indent + "}"
    return "unknown"


class TypeScriptEmitter(Emitter):
    """``tokens.d.ts`` matching the JS module's export."""

    target = Target.TYPESCRIPT
    format_name = "typescript"

    def render(self, context: EmitContext) -> str:
        flat = flat_tokens(self, context)
        lines = [f"  readonly {_key(name)}: {ts_type(value)};" for name, value in flat.items()]
        body = "\n".join(lines)
        return (
            f"{GENERATED_HEADER}\n"
            "export declare const tokens: {\n"
            f"{body}\n"
            "};\n"
            "\n"
            "export type Tokens = typeof tokens;\n"
            "export type TokenName = keyof Tokens;\n"
        )
