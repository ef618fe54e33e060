"""
Format emitters.

Each configured platform maps to one emitter class by target.
"""

from __future__ import annotations

from ..errors import EmitError
from ..ir import PlatformSpec, Target
from .base import GENERATED_HEADER, EmitContext, EmittedArtifact, Emitter, OutputMappings
from .css import CssEmitter
from .docs import DocsEmitter
from .js_module import JsModuleEmitter
from .json_nested import JsonNestedEmitter
from .mappings import MappingsEmitter
from .typescript import TypeScriptEmitter

EMITTERS: dict[Target, type[Emitter]] = {
    Target.CSS: CssEmitter,
    Target.JS: JsModuleEmitter,
    Target.TYPESCRIPT: TypeScriptEmitter,
    Target.JSON: JsonNestedEmitter,
    Target.DOCS: DocsEmitter,
    Target.MAPPINGS: MappingsEmitter,
}


def get_emitter(platform: PlatformSpec) -> Emitter:
    """Instantiate the emitter for a platform.

    Raises:
        EmitError: If no emitter handles the platform's target.
    """
    emitter_cls = EMITTERS.get(platform.target)
    if emitter_cls is None:
        raise EmitError(f"No emitter for target '{platform.target}'")
    return emitter_cls(platform)


__all__ = [
    "EMITTERS",
    "GENERATED_HEADER",
    "CssEmitter",
    "DocsEmitter",
    "EmitContext",
    "EmittedArtifact",
    "Emitter",
    "JsModuleEmitter",
    "JsonNestedEmitter",
    "MappingsEmitter",
    "OutputMappings",
    "TypeScriptEmitter",
    "get_emitter",
]
