"""
Theme Diff Engine.

Computes the minimal set of overrides a secondary theme needs on top of the
base theme. Comparison is on fully resolved values with deep equality, so a
dark-theme token that references a different primitive which happens to hold
the same value produces no override.

Only tokens under the configured prefix (semantic colors by default) take
part, which keeps structural and layout tokens out of theme blocks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .ir import ResolvedToken
from .references import ResolvedTokenSet

logger = logging.getLogger(__name__)

DEFAULT_OVERRIDE_PREFIX = "sys.color"


@dataclass(frozen=True)
class ThemeOverride:
    """A theme token whose resolved value differs from the base theme."""

    token: ResolvedToken
    base_value: Any = None
    is_new: bool = False

    @property
    def path(self) -> str:
        return self.token.path

    @property
    def value(self) -> Any:
        return self.token.resolved_value


@dataclass
class ThemeOverrideSet:
    """Overrides for one theme, in path order."""

    theme: str
    base_theme: str
    overrides: list[ThemeOverride] = field(default_factory=list)

    def __iter__(self):
        return iter(self.overrides)

    def __len__(self) -> int:
        return len(self.overrides)

    def __bool__(self) -> bool:
        return bool(self.overrides)

    @property
    def paths(self) -> list[str]:
        return [override.path for override in self.overrides]

    @property
    def added(self) -> list[ThemeOverride]:
        return [override for override in self.overrides if override.is_new]

    def as_token_set(self) -> ResolvedTokenSet:
        return ResolvedTokenSet({override.path: override.token for override in self.overrides})


def _in_scope(path: str, prefix: str | None) -> bool:
    if not prefix:
        return True
    return path == prefix or path.startswith(prefix + ".")


def diff_themes(
    base: ResolvedTokenSet,
    theme: ResolvedTokenSet,
    *,
    prefix: str | None = DEFAULT_OVERRIDE_PREFIX,
    theme_id: str = "theme",
    base_id: str = "base",
) -> ThemeOverrideSet:
    """Tokens of ``theme`` whose resolved value differs from ``base``.

    Args:
        base: Resolved base theme.
        theme: Resolved secondary theme.
        prefix: Dotted path prefix restricting the comparison; None or "" compares all.
        theme_id: Label for the theme in the result and log messages.
        base_id: Label for the base theme.

    Returns:
        ThemeOverrideSet ordered by path. Theme-only tokens are included and flagged.
    """
    result = ThemeOverrideSet(theme=theme_id, base_theme=base_id)

    for token in theme:
        if not _in_scope(token.path, prefix):
            continue

        base_token = base.get(token.path)
        if base_token is None:
            logger.warning(f"Theme '{theme_id}' defines '{token.path}' which is not in '{base_id}'")
            result.overrides.append(ThemeOverride(token=token, is_new=True))
            continue

        if token.resolved_value != base_token.resolved_value:
            result.overrides.append(ThemeOverride(token=token, base_value=base_token.resolved_value))

    logger.info(
        f"Theme '{theme_id}': {len(result)} overrides of '{base_id}'"
        + (f" under '{prefix}'" if prefix else "")
    )
    return result
