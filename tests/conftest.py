"""Shared pytest fixtures for tokenweave tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from tokenweave.core.ir import LayerSource, SourceFile
from tokenweave.core.references import ResolvedTokenSet, resolve
from tokenweave.core.store import TokenStore, merge


def write_json(root: Path, relative: str, tree: Any) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(tree, indent=2), encoding="utf-8")
    return path


# =============================================================================
# In-memory stores
# =============================================================================


@pytest.fixture
def make_layer() -> Callable[..., LayerSource]:
    """Build a LayerSource from {relative path: tree}."""

    def _make(
        name: str,
        priority: int,
        files: dict[str, dict[str, Any]],
        theme: str | None = None,
    ) -> LayerSource:
        return LayerSource(
            name=name,
            priority=priority,
            files=[SourceFile(path=path, tree=tree) for path, tree in files.items()],
            theme=theme,
        )

    return _make


@pytest.fixture
def make_store(make_layer) -> Callable[..., TokenStore]:
    """Merge a single token tree (one file, one layer) into a store."""

    def _make(tree: dict[str, Any]) -> TokenStore:
        return merge([make_layer("reference", 100, {"tokens.json": tree})])

    return _make


@pytest.fixture
def resolve_tree(make_store) -> Callable[[dict[str, Any]], ResolvedTokenSet]:
    """Merge and resolve a single token tree."""

    def _resolve(tree: dict[str, Any]) -> ResolvedTokenSet:
        return resolve(make_store(tree))

    return _resolve


# =============================================================================
# On-disk project
# =============================================================================

REFERENCE_COLORS = {
    "ref": {
        "color": {
            "$type": "color",
            "neutral": {
                "0": {"$value": "#ffffff"},
                "900": {"$value": "#111111"},
            },
            "blue": {
                "500": {
                    "$value": {"colorSpace": "srgb", "components": [0, 0.4, 1], "alpha": 1},
                },
            },
            "shadow": {
                "$value": {"colorSpace": "srgb", "components": [0, 0, 0], "alpha": 0.5},
            },
        }
    }
}

REFERENCE_SCALES = {
    "ref": {
        "spacing": {
            "$type": "dimension",
            "4": {"$value": {"value": 4, "unit": "px"}},
            "16": {"$value": {"value": 1, "unit": "rem"}},
        },
        "fontFamily": {
            "sans": {"$type": "fontFamily", "$value": ["Inter", "Helvetica Neue", "sans-serif"]},
        },
        "fontWeight": {
            "$type": "fontWeight",
            "400": {"$value": 400},
            "700": {"$value": 700},
        },
        "fontSize": {
            "md": {"$type": "dimension", "$value": {"value": 1, "unit": "rem"}},
        },
    }
}

SEMANTIC_BASE_COLORS = {
    "sys": {
        "color": {
            "$type": "color",
            "text": {
                "primary": {"$value": "{ref.color.neutral.900}", "$description": "Body text"},
            },
            "surface": {
                "default": {"$value": "{ref.color.neutral.0}"},
            },
            "action": {
                "primary": {"default": {"$value": "{ref.color.blue.500}"}},
            },
        }
    }
}

SEMANTIC_BASE_OTHER = {
    "sys": {
        "spacing": {
            "$type": "dimension",
            "sm": {"$value": "{ref.spacing.4}"},
            "lg": {"$value": {"value": 16, "unit": "px"}},
        },
        "typography": {
            "body": {
                "$type": "typography",
                "$value": {
                    "fontFamily": "{ref.fontFamily.sans}",
                    "fontSize": "{ref.fontSize.md}",
                    "fontWeight": "{ref.fontWeight.400}",
                    "lineHeight": 1.5,
                },
            }
        },
        "shadow": {
            "card": {
                "$type": "shadow",
                "$value": {
                    "offsetX": {"value": 0, "unit": "px"},
                    "offsetY": {"value": 2, "unit": "px"},
                    "blur": {"value": 4, "unit": "px"},
                    "spread": {"value": 0, "unit": "px"},
                    "color": "{ref.color.shadow}",
                },
            }
        },
    }
}

SEMANTIC_DARK_COLORS = {
    "sys": {
        "color": {
            "$type": "color",
            "text": {"primary": {"$value": "{ref.color.neutral.0}"}},
            "surface": {"default": {"$value": "{ref.color.neutral.900}"}},
            "action": {"primary": {"default": {"$value": "{ref.color.blue.500}"}}},
        }
    }
}

COMPONENT_BUTTON = {
    "cmp": {
        "button": {
            "$type": "color",
            "background": {
                "default": {"$value": "{sys.color.action.primary.default}"},
                "hover": {"$value": "{sys.color.action.primary.default}"},
                "active": {"$value": "{sys.color.action.primary.default}"},
                "disabled": {"$value": "{sys.color.surface.default}"},
            },
        }
    }
}


@pytest.fixture
def token_project(tmp_path: Path) -> Path:
    """A project using the default layout: reference, semantic base/dark, component."""
    tokens = tmp_path / "src" / "tokens"
    write_json(tokens, "reference/color.json", REFERENCE_COLORS)
    write_json(tokens, "reference/scales.json", REFERENCE_SCALES)
    write_json(tokens, "semantic/base/color.json", SEMANTIC_BASE_COLORS)
    write_json(tokens, "semantic/base/other.json", SEMANTIC_BASE_OTHER)
    write_json(tokens, "semantic/dark/color.json", SEMANTIC_DARK_COLORS)
    write_json(tokens, "component/button.json", COMPONENT_BUTTON)
    write_json(tokens, "$themes.json", [{"id": "light"}, {"id": "dark"}])
    return tmp_path


@pytest.fixture
def write_tokens() -> Callable[[Path, str, Any], Path]:
    """Write a JSON token file relative to a root directory."""
    return write_json
