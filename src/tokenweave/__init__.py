"""
tokenweave - design-token resolution and multi-target code generation.

Merges layered DTCG token sources, resolves cross-token references and
renders CSS custom properties, a flat JS module, a nested JSON tree and a
documentation catalogue from a single resolved token set.
"""

from __future__ import annotations

from ._version import get_version
from .core.errors import (
    ConfigError,
    CyclicReferenceError,
    DuplicateDefinitionConflict,
    EmitError,
    MalformedSourceFileError,
    TokenweaveError,
    UnresolvedReferenceError,
    UnsupportedTypeTransformWarning,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "TokenweaveError",
    "ConfigError",
    "CyclicReferenceError",
    "DuplicateDefinitionConflict",
    "EmitError",
    "MalformedSourceFileError",
    "UnresolvedReferenceError",
    "UnsupportedTypeTransformWarning",
]
