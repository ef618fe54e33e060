"""
sRGB color helpers.

DTCG color objects carry normalized ``components`` in [0, 1], an optional
``alpha`` and sometimes a precomputed ``hex``. These helpers convert them to
the two canonical output forms:

- ``rgb()``/``rgba()`` for CSS custom properties
- ``#rrggbb`` (plus an ``aa`` suffix when alpha < 1) for JS, JSON and docs

Channels are scaled by 255 and rounded half up, so both forms agree on every
channel for a given input.
"""

from __future__ import annotations

import math
import re
from typing import Any

_HEX_PATTERN = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_RGBA_PATTERN = re.compile(r"^rgba?\(\s*([^)]*)\)$")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_byte(component: float) -> int:
    """Scale a normalized channel to 0-255, clamped."""
    return _round_half_up(max(0.0, min(1.0, float(component))) * 255)


def format_alpha(alpha: float) -> str:
    """Alpha as a short decimal: 0.5 -> '0.5', 1.0 -> '1'."""
    rounded = round(float(alpha), 3)
    if rounded.is_integer():
        return str(int(rounded))
    return f"{rounded:g}"


def _is_channel(component: Any) -> bool:
    return isinstance(component, int | float) and not isinstance(component, bool)


def is_color_object(value: Any) -> bool:
    """True for DTCG color objects this module can convert."""
    if not isinstance(value, dict):
        return False
    if isinstance(value.get("hex"), str):
        return parse_hex(value["hex"]) is not None
    components = value.get("components")
    return (
        value.get("colorSpace", "srgb") == "srgb"
        and isinstance(components, list)
        and len(components) == 3
        and all(map(_is_channel, components))
    )


def get_alpha(value: dict[str, Any]) -> float:
    """Explicit ``alpha``, else the alpha byte of an 8-digit ``hex``, else 1."""
    alpha = value.get("alpha")
    if _is_channel(alpha):
        return float(alpha)
    if alpha is None and isinstance(value.get("hex"), str):
        parsed = parse_hex(value["hex"])
        if parsed is not None:
            return parsed[3]
    return 1.0


def _rgb_from_object(value: dict[str, Any]) -> tuple[int, int, int]:
    components = value.get("components")
    if isinstance(components, list) and len(components) == 3 and all(map(_is_channel, components)):
        r, g, b = components
        return to_byte(r), to_byte(g), to_byte(b)
    parsed = parse_hex(value["hex"])
    if parsed is None:
        raise ValueError(f"Invalid hex color: {value['hex']!r}")
    return parsed[0], parsed[1], parsed[2]


def color_to_hex(value: dict[str, Any]) -> str:
    """``#rrggbb`` with an alpha byte appended when alpha < 1.

    A ``hex`` field on the object wins over the components.
    """
    alpha = get_alpha(value)
    hex_field = value.get("hex")
    parsed = parse_hex(hex_field) if isinstance(hex_field, str) else None
    if parsed is not None:
        r, g, b, _alpha = parsed
    else:
        r, g, b = _rgb_from_object(value)
    base = f"#{r:02x}{g:02x}{b:02x}"
    if alpha < 1:
        return f"{base}{to_byte(alpha):02x}"
    return base


def color_to_rgb(value: dict[str, Any]) -> str:
    """CSS ``rgb(r, g, b)``, or ``rgba(r, g, b, a)`` when alpha < 1."""
    r, g, b = _rgb_from_object(value)
    alpha = get_alpha(value)
    if alpha < 1:
        return f"rgba({r}, {g}, {b}, {format_alpha(alpha)})"
    return f"rgb({r}, {g}, {b})"


def parse_hex(value: str) -> tuple[int, int, int, float] | None:
    """Parse ``#rgb``, ``#rgba``, ``#rrggbb`` or ``#rrggbbaa`` into (r, g, b, alpha)."""
    match = _HEX_PATTERN.match(value.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) in (3, 4):
        digits = "".join(ch * 2 for ch in digits)
    r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    alpha = int(digits[6:8], 16) / 255 if len(digits) == 8 else 1.0
    return r, g, b, alpha


def string_alpha(value: str) -> float | None:
    """Alpha carried by a hex8/hex4 or rgba() color string, if any."""
    parsed = parse_hex(value)
    if parsed is not None:
        return parsed[3]
    match = _RGBA_PATTERN.match(value.strip())
    if match:
        parts = [part.strip() for part in re.split(r"[,/\s]+", match.group(1)) if part.strip()]
        if len(parts) == 4:
            try:
                if parts[3].endswith("%"):
                    return float(parts[3][:-1]) / 100
                return float(parts[3])
            except ValueError:
                return None
        return 1.0
    return None


def opaque_color(value: str) -> str:
    """The same color with its alpha dropped: ``#rrggbbaa`` -> ``#rrggbb``, ``rgba()`` -> ``rgb()``."""
    parsed = parse_hex(value)
    if parsed is not None:
        if parsed[3] == 1.0 and len(value.strip()) in (4, 7):
            return value
        return f"#{parsed[0]:02x}{parsed[1]:02x}{parsed[2]:02x}"
    match = _RGBA_PATTERN.match(value.strip())
    if match:
        parts = [part for part in re.split(r"[,/\s]+", match.group(1)) if part]
        if len(parts) == 4:
            return f"rgb({parts[0]}, {parts[1]}, {parts[2]})"
    return value


def color_opacity(value: Any) -> float:
    """Opacity of any color representation, defaulting to 1."""
    if isinstance(value, dict):
        return get_alpha(value)
    if isinstance(value, str):
        alpha = string_alpha(value)
        if alpha is not None:
            return alpha
    return 1.0
