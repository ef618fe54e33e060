"""
Value Transform Engine.

Maps a resolved token value onto its representation for one output target.
Dispatch is an exhaustive ``match`` over ``TokenType``; each type has one
rule per target family:

- CSS: strings suitable for a custom property value
- JS / TypeScript / JSON: JSON-compatible values, dimensions as bare numbers
- Docs: human-readable values (hex colors, dimensions with their units)

A value whose shape has no rule for the target passes through unchanged and
an ``UnsupportedTypeTransformWarning`` is logged and collected. Transforms
never raise for bad token data.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, assert_never

from .color import color_opacity, color_to_hex, color_to_rgb, is_color_object, opaque_color
from .errors import UnsupportedTypeTransformWarning
from .ir import ResolvedToken, Target, TokenType
from .references import ResolvedTokenSet

logger = logging.getLogger(__name__)

DIMENSION_UNITS = ("px", "rem", "em", "%")
DURATION_UNITS = ("ms", "s")

# Typography sub-properties in output order, with their CSS suffixes
TYPOGRAPHY_PROPERTIES: dict[str, str] = {
    "fontFamily": "font-family",
    "fontSize": "font-size",
    "fontWeight": "font-weight",
    "lineHeight": "line-height",
    "letterSpacing": "letter-spacing",
}

SHADOW_PROPERTIES = ("offsetX", "offsetY", "blur", "spread", "color")

# Weight keys picked from legacy weight -> family objects, in order
_LEGACY_FAMILY_KEYS = ("400", "normal", "regular")

_DIMENSION_STRING = re.compile(r"^(-?\d+(?:\.\d+)?|-?\.\d+)(px|rem|em|%)$")


@dataclass(frozen=True)
class TransformOptions:
    """Numeric settings shared by every transform of one build."""

    base_font_size: float = 16
    rem_to_px: bool = True


class _Unsupported(Exception):
    """Internal signal: no rule for this value shape."""


def normalize_number(value: float) -> int | float:
    """Collapse whole floats to int so 16.0 renders as 16."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _fmt(value: float) -> str:
    return str(normalize_number(round(value, 4) if isinstance(value, float) else value))


# =============================================================================
# Transformer
# =============================================================================


class ValueTransformer:
    """Applies the per-type rules for one target."""

    def __init__(
        self,
        target: Target,
        options: TransformOptions | None = None,
        diagnostics: list[UnsupportedTypeTransformWarning] | None = None,
    ):
        self.target = target
        self.options = options or TransformOptions()
        self.diagnostics = diagnostics if diagnostics is not None else []

    @property
    def is_css(self) -> bool:
        return self.target.is_css

    @property
    def is_docs(self) -> bool:
        return self.target is Target.DOCS

    def transform_value(self, token_type: TokenType, value: Any, path: str = "<value>") -> Any:
        try:
            return self._dispatch(token_type, value)
        except _Unsupported as e:
            warning = UnsupportedTypeTransformWarning(path, str(token_type), str(self.target), str(e))
            logger.warning(str(warning))
            self.diagnostics.append(warning)
            return value

    def _dispatch(self, token_type: TokenType, value: Any) -> Any:
        match token_type:
            case TokenType.COLOR:
                return self.color(value)
            case TokenType.DIMENSION:
                return self.dimension(value)
            case TokenType.FONT_FAMILY:
                return self.font_family(value)
            case TokenType.FONT_WEIGHT:
                return self.font_weight(value)
            case TokenType.TYPOGRAPHY:
                return self.typography(value)
            case TokenType.SHADOW:
                return self.shadow(value)
            case TokenType.DURATION:
                return self.duration(value)
            case TokenType.CUBIC_BEZIER:
                return self.cubic_bezier(value)
            case TokenType.OTHER:
                return value
            case _:
                assert_never(token_type)

    # -- scalar types ---------------------------------------------------------

    def color(self, value: Any) -> Any:
        if isinstance(value, str):
            return value
        if is_color_object(value):
            if self.is_css:
                return color_to_rgb(value)
            return color_to_hex(value)
        raise _Unsupported(f"unrecognised color value {value!r}")

    def dimension(self, value: Any) -> Any:
        amount, unit = self._split_dimension(value)
        if self.is_css:
            if unit == "rem" and self.options.rem_to_px:
                return f"{_fmt(amount * self.options.base_font_size)}px"
            return f"{_fmt(amount)}{unit}"
        if self.is_docs:
            return f"{_fmt(amount)}{unit}"
        if unit == "rem":
            return normalize_number(amount * self.options.base_font_size)
        return normalize_number(amount)

    def _split_dimension(self, value: Any) -> tuple[float, str]:
        if _is_number(value):
            return value, "px"
        if isinstance(value, dict):
            amount = value.get("value")
            unit = value.get("unit", "px")
            if _is_number(amount) and unit in DIMENSION_UNITS:
                return amount, unit
        if isinstance(value, str):
            match = _DIMENSION_STRING.match(value.strip())
            if match:
                return float(match.group(1)), match.group(2)
        raise _Unsupported(f"unrecognised dimension value {value!r}")

    def font_family(self, value: Any) -> Any:
        families = self._family_list(value)
        if self.is_css:
            return ", ".join(f'"{name}"' if " " in name else name for name in families)
        return families

    def _family_list(self, value: Any) -> list[str]:
        if isinstance(value, str):
            return [part.strip().strip("'\"") for part in value.split(",") if part.strip()]
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return list(value)
        if isinstance(value, dict) and value:
            for key in _LEGACY_FAMILY_KEYS:
                if key in value:
                    return self._family_list(value[key])
            return self._family_list(next(iter(value.values())))
        raise _Unsupported(f"unrecognised font family {value!r}")

    def font_weight(self, value: Any) -> Any:
        if _is_number(value):
            return normalize_number(value)
        if isinstance(value, str):
            return value
        raise _Unsupported(f"unrecognised font weight {value!r}")

    def duration(self, value: Any) -> Any:
        if isinstance(value, str):
            return value
        if _is_number(value):
            amount, unit = value, "ms"
        elif (
            isinstance(value, dict)
            and _is_number(value.get("value"))
            and value.get("unit", "ms") in DURATION_UNITS
        ):
            amount, unit = value["value"], value.get("unit", "ms")
        else:
            raise _Unsupported(f"unrecognised duration {value!r}")
        if self.is_css or self.is_docs:
            return f"{_fmt(amount)}{unit}"
        return normalize_number(amount * 1000 if unit == "s" else amount)

    def cubic_bezier(self, value: Any) -> Any:
        if isinstance(value, str):
            return value
        if isinstance(value, list) and len(value) == 4 and all(_is_number(v) for v in value):
            points = [normalize_number(v) for v in value]
            if self.is_css:
                return f"cubic-bezier({', '.join(str(p) for p in points)})"
            return points
        raise _Unsupported(f"unrecognised cubic bezier {value!r}")

    # -- composites -----------------------------------------------------------

    def typography_properties(self, value: dict[str, Any]) -> dict[str, Any]:
        """Transform each present typography sub-property, in canonical order."""
        result: dict[str, Any] = {}
        for prop in TYPOGRAPHY_PROPERTIES:
            if prop not in value:
                continue
            sub = value[prop]
            match prop:
                case "fontFamily":
                    result[prop] = self.font_family(sub)
                case "fontWeight":
                    result[prop] = self.font_weight(sub)
                case "lineHeight" if _is_number(sub):
                    result[prop] = normalize_number(sub) if not self.is_css else _fmt(sub)
                case _ if isinstance(sub, str):
                    # Keywords and unitless strings ("normal", "1.5") are kept as written
                    try:
                        result[prop] = self.dimension(sub)
                    except _Unsupported:
                        result[prop] = sub
                case _:
                    result[prop] = self.dimension(sub)
        return result

    def typography(self, value: Any) -> Any:
        if not isinstance(value, dict):
            raise _Unsupported(f"typography value must be an object, got {type(value).__name__}")
        props = self.typography_properties(value)
        if not self.is_css:
            return props
        return typography_shorthand(props)

    def shadow(self, value: Any) -> Any:
        layers = value if isinstance(value, list) else [value]
        if not layers or not all(isinstance(layer, dict) for layer in layers):
            raise _Unsupported(f"shadow value must be an object or list of objects, got {value!r}")

        if self.is_css:
            return ", ".join(self._css_shadow_layer(layer) for layer in layers)
        if self.is_docs:
            docs_layers = [self._docs_shadow_layer(layer) for layer in layers]
            return docs_layers[0] if len(docs_layers) == 1 else docs_layers
        return self._native_shadow(layers)

    def _shadow_length(self, value: Any) -> float:
        if value is None:
            return 0
        amount, unit = self._split_dimension(value)
        if unit == "rem":
            return amount * self.options.base_font_size
        return amount

    def _css_shadow_layer(self, layer: dict[str, Any]) -> str:
        parts = [
            self.dimension(layer.get(prop, 0)) if layer.get(prop) is not None else "0px"
            for prop in ("offsetX", "offsetY", "blur", "spread")
        ]
        parts.append(str(self.color(layer.get("color", "#000000"))))
        css = " ".join(parts)
        return f"inset {css}" if layer.get("inset") else css

    def _docs_shadow_layer(self, layer: dict[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for prop in SHADOW_PROPERTIES:
            if prop not in layer:
                continue
            result[prop] = self.color(layer[prop]) if prop == "color" else self.dimension(layer[prop])
        if layer.get("inset"):
            result["inset"] = True
        return result

    def _native_shadow(self, layers: list[dict[str, Any]]) -> dict[str, Any]:
        """Collapse to one mobile-style shadow; ``boxShadow`` keeps every layer."""
        first = layers[0]
        raw_color = first.get("color", "#000000")
        color = self.color(raw_color)
        offset_x = normalize_number(self._shadow_length(first.get("offsetX")))
        offset_y = normalize_number(self._shadow_length(first.get("offsetY")))
        blur = self._shadow_length(first.get("blur"))

        box_shadow = []
        for layer in layers:
            layer_color = self.color(layer.get("color", "#000000"))
            lengths = [
                f"{_fmt(self._shadow_length(layer.get(prop)))}px"
                for prop in ("offsetX", "offsetY", "blur", "spread")
            ]
            entry = " ".join([*lengths, str(layer_color)])
            box_shadow.append(f"inset {entry}" if layer.get("inset") else entry)

        return {
            "shadowColor": _opaque(color),
            "shadowOffset": {"width": offset_x, "height": offset_y},
            "shadowOpacity": normalize_number(round(color_opacity(raw_color), 3)),
            "shadowRadius": normalize_number(blur / 2),
            "boxShadow": ", ".join(box_shadow),
        }


def _opaque(color: Any) -> Any:
    """Drop the alpha from a color string; opacity is reported separately."""
    if isinstance(color, str):
        return opaque_color(color)
    return color


def typography_shorthand(props: dict[str, Any]) -> str:
    """CSS ``font`` shorthand: ``{weight} {size}/{lineHeight} {family}``."""
    parts: list[str] = []
    if "fontWeight" in props:
        parts.append(str(props["fontWeight"]))
    if "fontSize" in props:
        size = str(props["fontSize"])
        if "lineHeight" in props:
            size = f"{size}/{props['lineHeight']}"
        parts.append(size)
    if "fontFamily" in props:
        parts.append(str(props["fontFamily"]))
    return " ".join(parts)


# =============================================================================
# Token-level API
# =============================================================================


@dataclass
class TransformedToken:
    """A resolved token and its value for one target."""

    token: ResolvedToken
    target: Target
    value: Any

    @property
    def path(self) -> str:
        return self.token.path

    @property
    def type(self) -> TokenType:
        return self.token.type


@dataclass
class TransformedTokenSet:
    """Every token of a build transformed for one target, in path order."""

    target: Target
    tokens: dict[str, TransformedToken] = field(default_factory=dict)
    diagnostics: list[UnsupportedTypeTransformWarning] = field(default_factory=list)

    def __iter__(self):
        return iter(self.tokens.values())

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, path: str) -> TransformedToken:
        return self.tokens[path]

    def values(self) -> dict[str, Any]:
        return {path: item.value for path, item in self.tokens.items()}


def transform_value(
    token_type: TokenType,
    value: Any,
    target: Target,
    options: TransformOptions | None = None,
    *,
    path: str = "<value>",
    diagnostics: list[UnsupportedTypeTransformWarning] | None = None,
) -> Any:
    """Transform a bare resolved value for a target."""
    return ValueTransformer(target, options, diagnostics).transform_value(token_type, value, path)


def transform(
    token: ResolvedToken,
    target: Target,
    options: TransformOptions | None = None,
    diagnostics: list[UnsupportedTypeTransformWarning] | None = None,
) -> TransformedToken:
    """Transform one resolved token for a target."""
    transformer = ValueTransformer(target, options, diagnostics)
    value = transformer.transform_value(token.type, token.resolved_value, token.path)
    return TransformedToken(token=token, target=target, value=value)


def transform_all(
    tokens: ResolvedTokenSet,
    target: Target,
    options: TransformOptions | None = None,
) -> TransformedTokenSet:
    """Transform a whole resolved set, collecting diagnostics."""
    result = TransformedTokenSet(target=target)
    transformer = ValueTransformer(target, options, result.diagnostics)
    for token in tokens:
        value = transformer.transform_value(token.type, token.resolved_value, token.path)
        result.tokens[token.path] = TransformedToken(token=token, target=target, value=value)
    logger.debug(
        f"Transformed {len(result)} tokens for {target} ({len(result.diagnostics)} warnings)"
    )
    return result
