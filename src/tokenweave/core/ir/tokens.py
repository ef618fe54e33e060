"""
Token IR types.

A token is a named, typed design value addressable by a dotted path. Raw
definitions come out of the loader as ``Token``; the resolver produces
``ResolvedToken`` with every ``{path}`` reference substituted.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Enums
# =============================================================================


class TokenType(StrEnum):
    """Closed set of token types with transform rules."""

    COLOR = "color"
    DIMENSION = "dimension"
    FONT_FAMILY = "fontFamily"
    FONT_WEIGHT = "fontWeight"
    TYPOGRAPHY = "typography"
    SHADOW = "shadow"
    DURATION = "duration"
    CUBIC_BEZIER = "cubicBezier"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> TokenType | None:
        """Map a ``$type`` string onto the enum; unknown strings become OTHER."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class Target(StrEnum):
    """Output targets with their own value representation rules."""

    CSS = "css"
    JS = "js"
    TYPESCRIPT = "typescript"
    JSON = "json"
    DOCS = "docs"
    MAPPINGS = "mappings"

    @property
    def is_css(self) -> bool:
        return self is Target.CSS


# Tiers recognised by the documentation catalogue
TIERS: tuple[str, ...] = ("ref", "sys", "cmp")


# =============================================================================
# Sources and layers
# =============================================================================


class TokenSource(BaseModel):
    """Where a token definition came from."""

    model_config = ConfigDict(frozen=True)

    file: str = Field(description="Source file path, relative to the tokens directory")
    layer: str = Field(description="Layer name")
    priority: int = Field(default=0, description="Layer merge priority")
    theme: str | None = Field(default=None, description="Theme id for theme layers")


class SourceFile(BaseModel):
    """A parsed JSON token tree and its location."""

    model_config = ConfigDict(frozen=True)

    path: str
    tree: dict[str, Any]


class LayerSource(BaseModel):
    """A named source tier with a merge priority.

    Files are merged in the order given; the loader sorts them
    lexicographically by relative path.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    priority: int
    files: list[SourceFile] = Field(default_factory=list)
    theme: str | None = None


# =============================================================================
# Tokens
# =============================================================================


class Token(BaseModel):
    """A raw token definition after merge; ``value`` may hold references."""

    model_config = ConfigDict(frozen=True)

    path: str
    type: TokenType | None = None
    value: Any = None
    description: str | None = None
    deprecated: bool | str | None = None
    extensions: dict[str, Any] = Field(default_factory=dict)
    source: TokenSource | None = None

    @property
    def segments(self) -> list[str]:
        return self.path.split(".")

    @property
    def tier(self) -> str:
        return self.segments[0]

    @property
    def is_deprecated(self) -> bool:
        return bool(self.deprecated)


class ReferenceInfo(BaseModel):
    """One reference found in a token's raw value."""

    model_config = ConfigDict(frozen=True)

    path: str
    value: Any = None
    type: TokenType | None = None
    property: str | None = Field(
        default=None, description="Composite property holding the reference, e.g. 'color'"
    )


class ReferenceHop(BaseModel):
    """One step of a reference chain: ``from_path`` points at ``to_path``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_path: str = Field(alias="from")
    to_path: str = Field(alias="to")
    value: Any = None


class ResolvedToken(BaseModel):
    """A token with every reference substituted by the target's resolved value."""

    model_config = ConfigDict(frozen=True)

    path: str
    type: TokenType
    value: Any = None
    resolved_value: Any = None
    description: str | None = None
    deprecated: bool | str | None = None
    source: TokenSource | None = None
    references: list[ReferenceInfo] = Field(default_factory=list)
    reference_chain: list[ReferenceHop] = Field(default_factory=list)

    @property
    def has_references(self) -> bool:
        return bool(self.references)

    @property
    def segments(self) -> list[str]:
        return self.path.split(".")

    @property
    def tier(self) -> str:
        return self.segments[0]
