"""
Flat JS module emitter.

Exports a single ``tokens`` object mapping flat camelCase identifiers to
JS-transformed values, in token path order.
"""

from __future__ import annotations

import json
from typing import Any

from ..errors import EmitError
from ..ir import Target
from ..naming import js_flat_name
from .base import GENERATED_HEADER, EmitContext, Emitter


def flat_tokens(emitter: Emitter, context: EmitContext) -> dict[str, Any]:
    """Flat name -> JS value for the emitter's selected tokens.

    Raises:
        EmitError: If two paths collapse to the same flat identifier.
    """
    transformed = context.transformed(emitter.select(context.tokens), Target.JS)
    flat: dict[str, Any] = {}
    owners: dict[str, str] = {}
    for item in transformed:
        name = js_flat_name(item.path)
        if name in owners:
            raise EmitError(
                f"Tokens '{owners[name]}' and '{item.path}' both map to JS name '{name}'"
            )
        owners[name] = item.path
        flat[name] = item.value
        context.mappings.record(item.path, emitter.format_name, name, emitter.filename)
    return flat


class JsModuleEmitter(Emitter):
    """``export const tokens = {...};``"""

    target = Target.JS
    format_name = "js"

    def render(self, context: EmitContext) -> str:
        flat = flat_tokens(self, context)
        body = json.dumps(flat, indent=2, ensure_ascii=False)
        return f"{GENERATED_HEADER}\nexport const tokens = {body};\n"
