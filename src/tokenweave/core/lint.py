"""
Token lint rules.

Rules inspect a merged (unresolved) TokenStore and report issues at a fixed
severity. Error-level issues are the ones that would also fail a build;
warnings flag convention violations that still produce valid artifacts.

Rules:
- no-hardcoded-colors (warning): only ``ref.*`` tokens may hold literal colors
- component-naming (warning): ``cmp.<component>.<property>...`` with a lowercase component
- required-states (warning): interactive components define every state
- require-token-types (warning): tokens declare ``$type`` unless it can be inferred
- no-circular-references (error): the reference graph is acyclic
- no-unresolved-references (error): every reference points at an existing token
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from .color import is_color_object
from .ir import TokenType
from .references import extract_references, is_pure_reference
from .store import TokenStore

logger = logging.getLogger(__name__)

INTERACTIVE_COMPONENTS = ("button", "input", "checkbox", "radioButton", "switch")
REQUIRED_STATES = ("default", "hover", "active", "disabled")

_LITERAL_COLOR_PREFIXES = ("#", "rgb", "hsl")


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class LintIssue:
    """One rule violation."""

    rule: str
    severity: Severity
    message: str
    path: str | None = None

    def __str__(self) -> str:
        return f"[{self.rule}] {self.message}"


class LintResult:
    """Result of linting a token store."""

    def __init__(self) -> None:
        self.errors: list[LintIssue] = []
        self.warnings: list[LintIssue] = []

    def add(self, issue: LintIssue) -> None:
        if issue.severity is Severity.ERROR:
            self.errors.append(issue)
        else:
            self.warnings.append(issue)

    def extend(self, other: LintResult) -> None:
        """Merge another result, skipping issues already reported."""
        seen = set(self.errors) | set(self.warnings)
        for issue in [*other.errors, *other.warnings]:
            if issue not in seen:
                self.add(issue)
                seen.add(issue)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def issues(self) -> list[LintIssue]:
        return [*self.errors, *self.warnings]

    def __repr__(self) -> str:
        return f"LintResult(errors={len(self.errors)}, warnings={len(self.warnings)})"


# =============================================================================
# Rules
# =============================================================================


def no_hardcoded_colors(store: TokenStore) -> list[LintIssue]:
    issues = []
    for token in store:
        if token.type is not TokenType.COLOR or token.path.startswith("ref."):
            continue
        value = token.value
        literal = (
            isinstance(value, str) and value.strip().lower().startswith(_LITERAL_COLOR_PREFIXES)
        ) or is_color_object(value)
        if literal:
            issues.append(
                LintIssue(
                    rule="no-hardcoded-colors",
                    severity=Severity.WARNING,
                    message=f"Color token '{token.path}' has a hardcoded value; reference a ref.* token instead",
                    path=token.path,
                )
            )
    return issues


def component_naming(store: TokenStore) -> list[LintIssue]:
    issues = []
    for token in store:
        if token.tier != "cmp":
            continue
        segments = token.segments
        if len(segments) < 3 or segments[1] != segments[1].lower():
            issues.append(
                LintIssue(
                    rule="component-naming",
                    severity=Severity.WARNING,
                    message=(
                        f"Component token '{token.path}' should follow "
                        "cmp.<component>.<property>.<state> with a lowercase component"
                    ),
                    path=token.path,
                )
            )
    return issues


def required_states(store: TokenStore) -> list[LintIssue]:
    states: dict[str, set[str]] = {}
    for token in store:
        if token.tier != "cmp" or len(token.segments) < 2:
            continue
        found = states.setdefault(token.segments[1], set())
        if token.segments[-1] in REQUIRED_STATES:
            found.add(token.segments[-1])

    issues = []
    for component in INTERACTIVE_COMPONENTS:
        if component not in states:
            continue
        for state in REQUIRED_STATES:
            if state not in states[component]:
                issues.append(
                    LintIssue(
                        rule="required-states",
                        severity=Severity.WARNING,
                        message=f"Interactive component '{component}' is missing state '{state}'",
                        path=f"cmp.{component}",
                    )
                )
    return issues


def require_token_types(store: TokenStore) -> list[LintIssue]:
    issues = []
    for token in store:
        if token.type is None and not is_pure_reference(token.value):
            issues.append(
                LintIssue(
                    rule="require-token-types",
                    severity=Severity.WARNING,
                    message=f"Token '{token.path}' has no $type",
                    path=token.path,
                )
            )
    return issues


def no_unresolved_references(store: TokenStore) -> list[LintIssue]:
    issues = []
    for token in store:
        for ref in extract_references(token.value):
            if ref not in store:
                issues.append(
                    LintIssue(
                        rule="no-unresolved-references",
                        severity=Severity.ERROR,
                        message=f"Token '{token.path}' references non-existent token '{ref}'",
                        path=token.path,
                    )
                )
    return issues


def find_cycles(graph: dict[str, list[str]]) -> list[list[str]]:
    """Every distinct cycle reachable in a reference graph, each closed (first == last)."""
    cycles: list[list[str]] = []
    seen_cycles: set[frozenset[str]] = set()
    done: set[str] = set()

    def visit(node: str, stack: list[str], on_stack: set[str]) -> None:
        stack.append(node)
        on_stack.add(node)
        for dep in graph.get(node, []):
            if dep in on_stack:
                cycle = [*stack[stack.index(dep) :], dep]
                key = frozenset(cycle)
                if key not in seen_cycles:
                    seen_cycles.add(key)
                    cycles.append(cycle)
            elif dep not in done and dep in graph:
                visit(dep, stack, on_stack)
        stack.pop()
        on_stack.discard(node)
        done.add(node)

    for node in sorted(graph):
        if node not in done:
            visit(node, [], set())
    return cycles


def no_circular_references(store: TokenStore) -> list[LintIssue]:
    graph = {token.path: extract_references(token.value) for token in store}
    return [
        LintIssue(
            rule="no-circular-references",
            severity=Severity.ERROR,
            message=f"Circular reference detected: {' -> '.join(cycle)}",
            path=cycle[0],
        )
        for cycle in find_cycles(graph)
    ]


RULES: dict[str, Callable[[TokenStore], list[LintIssue]]] = {
    "no-hardcoded-colors": no_hardcoded_colors,
    "component-naming": component_naming,
    "required-states": required_states,
    "require-token-types": require_token_types,
    "no-circular-references": no_circular_references,
    "no-unresolved-references": no_unresolved_references,
}


def lint(store: TokenStore, rules: list[str] | None = None) -> LintResult:
    """Run lint rules over a merged token store.

    Args:
        store: Merged, unresolved tokens.
        rules: Rule names to run (default: all).

    Raises:
        ValueError: If a rule name is unknown.
    """
    selected = list(RULES) if rules is None else rules
    unknown = [name for name in selected if name not in RULES]
    if unknown:
        raise ValueError(f"Unknown lint rules: {', '.join(unknown)}")

    result = LintResult()
    for name in selected:
        for issue in RULES[name](store):
            result.add(issue)
    logger.info(f"Lint: {len(result.errors)} errors, {len(result.warnings)} warnings")
    return result
