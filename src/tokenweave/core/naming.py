"""
Cross-format identifiers derived from a token path.

Every emitter and the documentation catalogue name tokens through these
functions so a token's CSS variable, flat JS name and nested JSON path
always agree.
"""

from __future__ import annotations

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _segments(path: str | list[str]) -> list[str]:
    return path.split(".") if isinstance(path, str) else list(path)


def kebab_case(segment: str) -> str:
    """``paddingX`` -> ``padding-x``, ``semi_bold`` -> ``semi-bold``."""
    return _CAMEL_BOUNDARY.sub("-", segment).replace("_", "-").replace(" ", "-").lower()


def css_variable_name(path: str | list[str]) -> str:
    """``sys.color.textPrimary`` -> ``--sys-color-text-primary``."""
    return "--" + "-".join(kebab_case(segment) for segment in _segments(path))


def css_var(path: str | list[str]) -> str:
    """``var()`` expression for a token."""
    return f"var({css_variable_name(path)})"


def _capitalize(piece: str) -> str:
    return piece[:1].upper() + piece[1:]


def _camel_hyphens(segment: str, *, leading: bool) -> str:
    pieces = [piece for piece in re.split(r"[-_\s]+", segment) if piece]
    if not pieces:
        return ""
    first = pieces[0][:1].lower() + pieces[0][1:] if leading else _capitalize(pieces[0])
    return first + "".join(_capitalize(piece) for piece in pieces[1:])


def js_flat_name(path: str | list[str]) -> str:
    """Flat camelCase identifier: ``sys.color.text-primary`` -> ``sysColorTextPrimary``.

    The first segment starts lowercase; numeric segments are kept as-is.
    """
    parts: list[str] = []
    for index, segment in enumerate(_segments(path)):
        if index > 0 and segment[:1].isdigit():
            parts.append(segment)
        else:
            parts.append(_camel_hyphens(segment, leading=index == 0))
    return "".join(parts)


def js_path(path: str | list[str], root: str = "tokens") -> str:
    """Dotted accessor into the nested JSON tree: ``tokens.sys.color.primary``."""
    return ".".join([root, *_segments(path)])
