"""
Error types for token loading, merging, resolution and emission.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class TokenweaveError(Exception):
    """Base exception for all tokenweave errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        location = self.context.format() if self.context else ""
        if location:
            return f"{location}\n{self.message}"
        return self.message


class MalformedSourceFileError(TokenweaveError):
    """
    Raised when a token source file cannot be used.

    Examples:
    - File is not valid JSON
    - Top level is not an object
    - A group contains a scalar where a token or group is expected
    """

    def __init__(self, message: str, file: Path | str, context: ErrorContext | None = None):
        self.file = Path(file)
        super().__init__(message, context or ErrorContext(file=self.file))


class DuplicateDefinitionConflict(TokenweaveError):
    """
    Raised when two sources in the same layer define one path differently.

    Cross-layer collisions are resolved by priority and never raise.
    """

    def __init__(self, path: str, layer: str, files: list[str]):
        self.path = path
        self.layer = layer
        self.files = files
        self.paths = [path]
        super().__init__(
            f"Token '{path}' is defined with different values in layer '{layer}' "
            f"by: {', '.join(files)}",
            ErrorContext(token_path=path, layer=layer),
        )


class UnresolvedReferenceError(TokenweaveError):
    """Raised when a `{path}` reference points at a token that does not exist."""

    def __init__(self, path: str, reference: str):
        self.path = path
        self.reference = reference
        super().__init__(
            f"Token '{path}' references non-existent token '{reference}'",
            ErrorContext(token_path=path),
        )


class CyclicReferenceError(TokenweaveError):
    """Raised when resolving a token requires resolving itself."""

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        self.path = cycle[0] if cycle else ""
        super().__init__(
            f"Circular reference detected: {' -> '.join(cycle)}",
            ErrorContext(token_path=self.path),
        )


class ConfigError(TokenweaveError):
    """Raised when tokenweave.yaml cannot be loaded or validated."""

    pass


class EmitError(TokenweaveError):
    """
    Raised when an emitter cannot render the token set.

    Examples:
    - A path is both a token and a group in the nested JSON tree
    - Unknown output target
    """

    pass


class UnsupportedTypeTransformWarning(UserWarning):
    """
    A token type has no transform rule for the requested target.

    Never raised. Instances are logged and collected as build diagnostics
    while the raw value passes through unchanged.
    """

    def __init__(self, path: str, token_type: str, target: str, detail: str = ""):
        self.path = path
        self.token_type = token_type
        self.target = target
        self.detail = detail
        message = f"No '{target}' transform for {token_type} token '{path}'"
        if detail:
            message += f": {detail}"
        super().__init__(message)


@dataclass
class ErrorContext:
    """
    Context information for an error.

    Attributes:
        file: Source file the offending definition came from
        token_path: Dotted path of the offending token
        layer: Layer name the definition belongs to
    """

    file: Path | None = None
    token_path: str | None = None
    layer: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "tokens/color.json: sys.color.text (layer semantic_base)"
        """
        parts: list[str] = []
        if self.file:
            parts.append(str(self.file))
        if self.token_path:
            parts.append(self.token_path)
        location = ": ".join(parts)
        if self.layer:
            location = f"{location} (layer {self.layer})" if location else f"layer {self.layer}"
        return location
