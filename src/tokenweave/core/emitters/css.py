"""
CSS custom property emitter.

Renders the base theme as one ``:root`` block (selector configurable) with
one custom property per token in path order, followed by an override block
per secondary theme containing only the properties that theme changes. The
``dark`` theme is mirrored into a ``prefers-color-scheme`` media query that
applies unless the base theme is forced via ``data-theme``.
"""

from __future__ import annotations

import json
from typing import Any

from ..ir import Target, TokenType
from ..naming import css_var, css_variable_name
from ..references import ResolvedTokenSet, extract_references, is_pure_reference
from ..transforms import TYPOGRAPHY_PROPERTIES, TransformedToken, ValueTransformer, normalize_number
from .base import GENERATED_HEADER, EmitContext, Emitter

DARK_THEME_ID = "dark"


def css_text(value: Any) -> str:
    """Render a transformed value as CSS text."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(normalize_number(value))
    if isinstance(value, list) and all(isinstance(item, str | int | float) for item in value):
        return ", ".join(css_text(item) for item in value)
    return json.dumps(value, sort_keys=True)


class CssEmitter(Emitter):
    """CSS custom properties with theme override blocks."""

    target = Target.CSS
    format_name = "css"

    def render(self, context: EmitContext) -> str:
        selected = self.select(context.tokens)
        transformed = context.transformed(selected, Target.CSS)
        transformer = ValueTransformer(Target.CSS, context.transform_options, context.diagnostics)

        declarations: list[str] = []
        for item in transformed:
            for name, value in self._declarations(item, selected, transformer):
                declarations.append(f"  {name}: {value};")
            context.mappings.record(item.path, self.format_name, css_variable_name(item.path), self.filename)

        parts = [GENERATED_HEADER, _block(self.options.selector, declarations)]

        if self.options.include_themes:
            for theme in context.themes:
                override_set = context.overrides.get(theme.id)
                if theme.id == context.base_theme or not override_set:
                    continue
                theme_tokens = self.select(override_set.as_token_set())
                if not len(theme_tokens):
                    continue
                lines = [
                    f"  {name}: {value};"
                    for item in context.transformed(theme_tokens, Target.CSS)
                    for name, value in self._declarations(item, None, transformer)
                ]
                parts.append(_block(f'[data-theme="{theme.id}"]', lines))
                if theme.id == DARK_THEME_ID:
                    parts.append(_media_block(self.options.selector, context.base_theme, lines))

        return "\n".join(parts)

    def _declarations(
        self,
        item: TransformedToken,
        selected: ResolvedTokenSet | None,
        transformer: ValueTransformer,
    ) -> list[tuple[str, str]]:
        token = item.token
        name = css_variable_name(token.path)

        if token.type is TokenType.TYPOGRAPHY and isinstance(token.resolved_value, dict):
            if not self.options.expand_composites:
                return [(name, "initial")]
            # A typography value that failed to transform is still the raw dict
            if isinstance(item.value, str):
                expanded = [(name, item.value)]
                props = transformer.typography_properties(token.resolved_value)
                for prop, suffix in TYPOGRAPHY_PROPERTIES.items():
                    if prop in props:
                        expanded.append((f"{name}-{suffix}", css_text(props[prop])))
                return expanded

        if self.options.output_references and selected is not None and is_pure_reference(token.value):
            target = extract_references(token.value)[0]
            if target in selected:
                return [(name, css_var(target))]

        return [(name, css_text(item.value))]


def _block(selector: str, lines: list[str]) -> str:
    if not lines:
        return f"{selector} {{\n}}\n"
    return f"{selector} {{\n" + "\n".join(lines) + "\n}\n"


def _media_block(selector: str, base_theme: str, lines: list[str]) -> str:
    inner = "\n".join(f"  {line}" for line in lines)
    return (
        "@media (prefers-color-scheme: dark) {\n"
        f'  {selector}:not([data-theme="{base_theme}"]) {{\n'
        f"{inner}\n"
        "  }\n"
        "}\n"
    )
