"""
Intermediate representation for tokens and build configuration.
"""

from .config import (
    THEME_LAYER_PRIORITY,
    BuildConfig,
    EmitOptions,
    LayerSpec,
    PlatformSpec,
    ThemeSpec,
)
from .tokens import (
    TIERS,
    LayerSource,
    ReferenceHop,
    ReferenceInfo,
    ResolvedToken,
    SourceFile,
    Target,
    Token,
    TokenSource,
    TokenType,
)

__all__ = [
    # Tokens
    "TIERS",
    "LayerSource",
    "ReferenceHop",
    "ReferenceInfo",
    "ResolvedToken",
    "SourceFile",
    "Target",
    "Token",
    "TokenSource",
    "TokenType",
    # Config
    "THEME_LAYER_PRIORITY",
    "BuildConfig",
    "EmitOptions",
    "LayerSpec",
    "PlatformSpec",
    "ThemeSpec",
]
