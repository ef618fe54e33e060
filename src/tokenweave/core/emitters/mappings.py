"""
Output mappings emitter.

Serializes the build's ``OutputMappings`` accumulator: for each token path,
the identifier and file it was given by every other emitter. The pipeline
runs this emitter after all others.
"""

from __future__ import annotations

import json

from ..ir import Target
from .base import EmitContext, Emitter


class MappingsEmitter(Emitter):
    """``token-mappings.json``"""

    target = Target.MAPPINGS
    format_name = "mappings"

    def render(self, context: EmitContext) -> str:
        mappings = context.mappings.to_dict()
        document = {"tokens": mappings, "metadata": {"totalTokens": len(mappings)}}
        return json.dumps(document, indent=2, ensure_ascii=False) + "\n"
