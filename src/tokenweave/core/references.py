"""
Reference Resolver.

Substitutes ``{dotted.path}`` references inside token values with the
*resolved* value of the target token, so chains resolve transitively.
Strings are scanned directly; each property of object and array composite
values is scanned independently.

Resolution is memoized: once a token's value has been resolved, dependents
reuse it. A token that is requested again while it is still being resolved
signals a cycle. Missing targets and cycles are fatal to the build.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from .color import color_to_hex, is_color_object
from .errors import CyclicReferenceError, UnresolvedReferenceError
from .ir import ReferenceHop, ReferenceInfo, ResolvedToken, TokenType
from .store import TokenStore

logger = logging.getLogger(__name__)

REFERENCE_PATTERN = re.compile(r"\{([^{}]+)\}")


# =============================================================================
# Reference scanning
# =============================================================================


def is_pure_reference(value: Any) -> bool:
    """True when the whole value is a single ``{path}`` reference."""
    return isinstance(value, str) and REFERENCE_PATTERN.fullmatch(value.strip()) is not None


def uses_references(value: Any) -> bool:
    return bool(extract_references(value))


def extract_references(value: Any) -> list[str]:
    """All referenced paths in a value, in document order, without duplicates."""
    seen: dict[str, None] = {}
    for path, _property in _scan(value, None):
        seen.setdefault(path, None)
    return list(seen)


def _scan(value: Any, prop: str | None) -> Iterator[tuple[str, str | None]]:
    if isinstance(value, str):
        for match in REFERENCE_PATTERN.finditer(value):
            yield match.group(1).strip(), prop
    elif isinstance(value, dict):
        for key, child in value.items():
            yield from _scan(child, key if prop is None else prop)
    elif isinstance(value, list):
        for item in value:
            yield from _scan(item, prop)


def stringify_value(value: Any) -> str:
    """Render a resolved value for interpolation inside a larger string."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return _format_number(value)
    if isinstance(value, dict) and "value" in value and "unit" in value:
        return f"{stringify_value(value['value'])}{value['unit']}"
    if is_color_object(value):
        return color_to_hex(value)
    return json.dumps(value, sort_keys=True)


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# =============================================================================
# Resolved token set
# =============================================================================


@dataclass
class ResolvedTokenSet:
    """Fully resolved tokens keyed by path, in lexicographic path order."""

    tokens: dict[str, ResolvedToken] = field(default_factory=dict)

    def __contains__(self, path: object) -> bool:
        return path in self.tokens

    def __getitem__(self, path: str) -> ResolvedToken:
        return self.tokens[path]

    def __len__(self) -> int:
        return len(self.tokens)

    def __iter__(self) -> Iterator[ResolvedToken]:
        return iter(self.tokens.values())

    def get(self, path: str) -> ResolvedToken | None:
        return self.tokens.get(path)

    def resolved_values(self) -> dict[str, Any]:
        return {path: token.resolved_value for path, token in self.tokens.items()}

    def with_prefix(self, prefix: str) -> ResolvedTokenSet:
        """Subset under a dotted path prefix (segment-aligned)."""
        if not prefix:
            return ResolvedTokenSet(dict(self.tokens))
        return ResolvedTokenSet(
            {
                path: token
                for path, token in self.tokens.items()
                if path == prefix or path.startswith(prefix + ".")
            }
        )


# =============================================================================
# Resolver
# =============================================================================


class ReferenceResolver:
    """Resolves every token of a store; one instance per build."""

    def __init__(self, store: TokenStore):
        self.store = store
        self._values: dict[str, Any] = {}
        self._types: dict[str, TokenType] = {}
        self._stack: list[str] = []
        self._in_progress: set[str] = set()

    # -- values ---------------------------------------------------------------

    def resolve_value(self, path: str) -> Any:
        """Resolved value of a token, computing and caching it on first use."""
        if path in self._values:
            return self._values[path]

        if path in self._in_progress:
            start = self._stack.index(path)
            raise CyclicReferenceError([*self._stack[start:], path])

        token = self.store.get(path)
        if token is None:
            owner = self._stack[-1] if self._stack else path
            raise UnresolvedReferenceError(owner, path)

        self._stack.append(path)
        self._in_progress.add(path)
        try:
            resolved = self._substitute(token.value)
        finally:
            self._stack.pop()
            self._in_progress.discard(path)

        self._values[path] = resolved
        return resolved

    def _substitute(self, value: Any) -> Any:
        if isinstance(value, str):
            if is_pure_reference(value):
                target = REFERENCE_PATTERN.fullmatch(value.strip()).group(1).strip()  # type: ignore[union-attr]
                return copy.deepcopy(self._lookup(target))
            if "{" not in value:
                return value
            return REFERENCE_PATTERN.sub(
                lambda match: stringify_value(self._lookup(match.group(1).strip())), value
            )
        if isinstance(value, dict):
            return {key: self._substitute(child) for key, child in value.items()}
        if isinstance(value, list):
            return [self._substitute(item) for item in value]
        return value

    def _lookup(self, target: str) -> Any:
        token = self.store.get(target)
        if token is not None and token.is_deprecated and self._stack:
            logger.warning(f"'{self._stack[-1]}' references deprecated token '{target}'")
        return self.resolve_value(target)

    # -- types ----------------------------------------------------------------

    def resolve_type(self, path: str) -> TokenType:
        """Declared type, else the type of a single referenced token, else OTHER."""
        if path in self._types:
            return self._types[path]

        token = self.store[path]
        token_type = token.type
        if token_type is None:
            token_type = TokenType.OTHER
            if is_pure_reference(token.value):
                target = extract_references(token.value)[0]
                if target in self.store and target != path:
                    self._types[path] = TokenType.OTHER
                    token_type = self.resolve_type(target)

        self._types[path] = token_type
        return token_type

    # -- metadata -------------------------------------------------------------

    def reference_infos(self, path: str) -> list[ReferenceInfo]:
        infos: list[ReferenceInfo] = []
        for target, prop in _scan(self.store[path].value, None):
            infos.append(
                ReferenceInfo(
                    path=target,
                    value=self.resolve_value(target),
                    type=self.resolve_type(target),
                    property=prop,
                )
            )
        return infos

    def reference_chain(self, path: str) -> list[ReferenceHop]:
        """Follow the first reference of each token until a literal is reached."""
        chain: list[ReferenceHop] = []
        visited = {path}
        current = path
        while True:
            refs = extract_references(self.store[current].value)
            if not refs:
                break
            target = refs[0]
            chain.append(
                ReferenceHop.model_validate(
                    {"from": current, "to": target, "value": self.resolve_value(target)}
                )
            )
            if target in visited:
                break
            visited.add(target)
            current = target
        return chain

    def resolve_token(self, path: str) -> ResolvedToken:
        token = self.store[path]
        resolved_value = self.resolve_value(path)
        references = self.reference_infos(path)
        return ResolvedToken(
            path=path,
            type=self.resolve_type(path),
            value=token.value,
            resolved_value=resolved_value,
            description=token.description,
            deprecated=token.deprecated,
            source=token.source,
            references=references,
            reference_chain=self.reference_chain(path) if references else [],
        )

    def resolve_all(self) -> ResolvedTokenSet:
        # Values first so the first fatal error surfaces before any metadata work
        for path in self.store.paths():
            self.resolve_value(path)
        tokens = {path: self.resolve_token(path) for path in self.store.paths()}
        with_refs = sum(1 for token in tokens.values() if token.has_references)
        logger.info(f"Resolved {len(tokens)} tokens ({with_refs} with references)")
        return ResolvedTokenSet(tokens)


def resolve(store: TokenStore) -> ResolvedTokenSet:
    """Resolve every token in a store.

    Raises:
        UnresolvedReferenceError: A reference points at a missing path.
        CyclicReferenceError: The reference graph has a cycle.
    """
    return ReferenceResolver(store).resolve_all()
