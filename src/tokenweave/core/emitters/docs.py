"""
Documentation catalogue emitter.

Produces a JSON catalogue grouped by tier (``ref``, ``sys``, ``cmp``) and
then by category (the second path segment). Each entry carries the token's
identifiers in every output format together with its reference metadata, for
display tooling such as a token reference table.

The catalogue carries no timestamp so repeated builds are byte-identical.
"""

from __future__ import annotations

import json
from typing import Any

from ..ir import TIERS, ResolvedToken, Target, TokenType
from ..naming import css_variable_name, js_flat_name, js_path
from ..transforms import SHADOW_PROPERTIES, TYPOGRAPHY_PROPERTIES, ValueTransformer
from .base import EmitContext, Emitter

ROOT_CATEGORY = "root"


class DocsEmitter(Emitter):
    """Tier-grouped token catalogue."""

    target = Target.DOCS
    format_name = "docs"

    def render(self, context: EmitContext) -> str:
        selected = self.select(context.tokens)
        transformed = context.transformed(selected, Target.DOCS)
        transformer = ValueTransformer(Target.DOCS, context.transform_options, context.diagnostics)

        catalogue: dict[str, Any] = {tier: {} for tier in TIERS}
        total = 0
        for item in transformed:
            token = item.token
            if token.tier not in TIERS:
                continue
            category = token.segments[1] if len(token.segments) > 1 else ROOT_CATEGORY
            entry = build_entry(token, item.value, context, transformer)
            catalogue[token.tier].setdefault(category, []).append(entry)
            total += 1

        catalogue["metadata"] = {"totalTokens": total}
        return json.dumps(catalogue, indent=2, ensure_ascii=False) + "\n"


def build_entry(
    token: ResolvedToken,
    value: Any,
    context: EmitContext,
    transformer: ValueTransformer,
) -> dict[str, Any]:
    """One catalogue entry for a resolved token."""
    entry: dict[str, Any] = {
        "name": js_flat_name(token.path),
        "path": token.path,
        "type": str(token.type),
        "description": token.description or "",
        "deprecated": token.deprecated if token.deprecated is not None else False,
        "originalValue": token.value,
        "value": value,
        "cssVariable": css_variable_name(token.path),
        "jsPath": js_path(token.path),
        "jsFlat": js_flat_name(token.path),
        "hasReferences": token.has_references,
        "references": [],
    }

    for ref in token.references:
        ref_entry: dict[str, Any] = {
            "path": ref.path,
            "value": transformer.transform_value(ref.type or TokenType.OTHER, ref.value, ref.path),
            "type": str(ref.type) if ref.type else None,
        }
        if ref.property is not None:
            ref_entry["property"] = ref.property
        entry["references"].append(ref_entry)

    if token.has_references:
        chain = []
        for hop in token.reference_chain:
            target = context.tokens.get(hop.to_path)
            hop_type = target.type if target else TokenType.OTHER
            chain.append(
                {
                    "from": hop.from_path,
                    "to": hop.to_path,
                    "value": transformer.transform_value(hop_type, hop.value, hop.to_path),
                }
            )
        entry["referenceChain"] = chain

    expanded = expanded_value(token.type, value)
    if expanded is not None:
        entry["expandedValue"] = expanded
    return entry


def expanded_value(token_type: TokenType, value: Any) -> Any:
    """Per-property breakdown of typography and shadow values."""
    if token_type is TokenType.TYPOGRAPHY and isinstance(value, dict):
        return {prop: value[prop] for prop in TYPOGRAPHY_PROPERTIES if prop in value}
    if token_type is TokenType.SHADOW:
        if isinstance(value, dict):
            return {prop: value[prop] for prop in SHADOW_PROPERTIES if prop in value}
        if isinstance(value, list):
            return [
                {prop: layer[prop] for prop in SHADOW_PROPERTIES if prop in layer}
                for layer in value
                if isinstance(layer, dict)
            ]
    return None
