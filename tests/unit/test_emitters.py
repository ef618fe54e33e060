"""Tests for the format emitters."""

from __future__ import annotations

import json

import pytest

from tokenweave.core.emitters import (
    GENERATED_HEADER,
    CssEmitter,
    DocsEmitter,
    EmitContext,
    JsModuleEmitter,
    JsonNestedEmitter,
    MappingsEmitter,
    TypeScriptEmitter,
    get_emitter,
)
from tokenweave.core.errors import EmitError
from tokenweave.core.ir import EmitOptions, PlatformSpec, Target, ThemeSpec
from tokenweave.core.references import resolve
from tokenweave.core.store import merge
from tokenweave.core.theme_diff import diff_themes

SIMPLE = {
    "ref": {
        "color": {"white": {"$type": "color", "$value": "#ffffff", "$description": "Paper"}},
        "space": {"4": {"$type": "dimension", "$value": {"value": 4, "unit": "px"}}},
    },
    "sys": {
        "color": {"bg": {"$value": "{ref.color.white}"}},
        "space": {"sm": {"$value": "{ref.space.4}"}},
    },
}

TYPOGRAPHY = {
    "sys": {
        "typography": {
            "body": {
                "$type": "typography",
                "$value": {
                    "fontFamily": ["Inter", "Helvetica Neue", "sans-serif"],
                    "fontSize": {"value": 1, "unit": "rem"},
                    "fontWeight": 400,
                    "lineHeight": 1.5,
                },
            }
        }
    }
}


def _platform(target: Target, filename: str, **options) -> PlatformSpec:
    return PlatformSpec(target=target, filename=filename, options=EmitOptions(**options))


def _js_body(content: str) -> dict:
    prefix = f"{GENERATED_HEADER}\nexport const tokens = "
    assert content.startswith(prefix)
    assert content.endswith(";\n")
    return json.loads(content[len(prefix) : -2])


def _themed_context(resolve_tree) -> EmitContext:
    base = resolve_tree(SIMPLE)
    dark_tree = json.loads(json.dumps(SIMPLE))
    dark_tree["ref"]["color"]["black"] = {"$type": "color", "$value": "#000000"}
    dark_tree["sys"]["color"]["bg"] = {"$value": "{ref.color.black}"}
    dark = resolve_tree(dark_tree)
    return EmitContext(
        tokens=base,
        base_theme="light",
        themes=[ThemeSpec(id="light"), ThemeSpec(id="dark")],
        overrides={"dark": diff_themes(base, dark, theme_id="dark", base_id="light")},
    )


@pytest.fixture
def simple_context(resolve_tree) -> EmitContext:
    return EmitContext(tokens=resolve_tree(SIMPLE))


# =============================================================================
# CSS
# =============================================================================


class TestCssEmitter:
    """Test custom property blocks."""

    def test_root_block(self, simple_context):
        content = CssEmitter(_platform(Target.CSS, "tokens.css")).render(simple_context)

        assert content == (
            GENERATED_HEADER
            + "\n"
            + ":root {\n"
            + "  --ref-color-white: #ffffff;\n"
            + "  --ref-space-4: 4px;\n"
            + "  --sys-color-bg: #ffffff;\n"
            + "  --sys-space-sm: 4px;\n"
            + "}\n"
        )

    def test_tier_filter_and_selector(self, simple_context):
        emitter = CssEmitter(
            _platform(Target.CSS, "tokens.css", include_tiers=["sys"], selector=".app")
        )
        content = emitter.render(simple_context)

        assert ".app {\n" in content
        assert "--ref-color-white" not in content
        assert "--sys-color-bg: #ffffff;" in content

    def test_output_references(self, simple_context):
        emitter = CssEmitter(_platform(Target.CSS, "tokens.css", output_references=True))
        content = emitter.render(simple_context)
        assert "--sys-color-bg: var(--ref-color-white);" in content

    def test_output_references_fall_back_when_target_filtered(self, simple_context):
        emitter = CssEmitter(
            _platform(Target.CSS, "tokens.css", output_references=True, include_tiers=["sys"])
        )
        content = emitter.render(simple_context)
        assert "--sys-color-bg: #ffffff;" in content

    def test_typography_expanded(self, resolve_tree):
        context = EmitContext(tokens=resolve_tree(TYPOGRAPHY))
        content = CssEmitter(_platform(Target.CSS, "tokens.css")).render(context)

        family = 'Inter, "Helvetica Neue", sans-serif'
        assert f"  --sys-typography-body: 400 16px/1.5 {family};\n" in content
        assert f"  --sys-typography-body-font-family: {family};\n" in content
        assert "  --sys-typography-body-font-size: 16px;\n" in content
        assert "  --sys-typography-body-font-weight: 400;\n" in content
        assert "  --sys-typography-body-line-height: 1.5;\n" in content

    def test_typography_not_expanded(self, resolve_tree):
        context = EmitContext(tokens=resolve_tree(TYPOGRAPHY))
        emitter = CssEmitter(_platform(Target.CSS, "tokens.css", expand_composites=False))
        content = emitter.render(context)

        assert "  --sys-typography-body: initial;\n" in content
        assert "font-family" not in content

    def test_theme_blocks(self, resolve_tree):
        context = _themed_context(resolve_tree)
        content = CssEmitter(_platform(Target.CSS, "tokens.css")).render(context)

        assert content.endswith(
            '[data-theme="dark"] {\n'
            "  --sys-color-bg: #000000;\n"
            "}\n"
            "\n"
            "@media (prefers-color-scheme: dark) {\n"
            '  :root:not([data-theme="light"]) {\n'
            "    --sys-color-bg: #000000;\n"
            "  }\n"
            "}\n"
        )

    def test_media_block_uses_selector(self, resolve_tree):
        context = _themed_context(resolve_tree)
        content = CssEmitter(_platform(Target.CSS, "tokens.css", selector=".app")).render(context)

        assert content.startswith(GENERATED_HEADER + "\n.app {\n")
        assert '  .app:not([data-theme="light"]) {\n' in content
        assert ":root" not in content

    def test_theme_blocks_disabled(self, resolve_tree):
        context = _themed_context(resolve_tree)
        content = CssEmitter(_platform(Target.CSS, "tokens.css", include_themes=False)).render(
            context
        )
        assert "data-theme" not in content

    def test_records_mappings(self, simple_context):
        CssEmitter(_platform(Target.CSS, "css/tokens.css")).render(simple_context)
        assert simple_context.mappings.get("sys.color.bg") == {
            "css": {"name": "--sys-color-bg", "file": "css/tokens.css"}
        }


# =============================================================================
# JS, TypeScript and JSON
# =============================================================================


class TestJsModuleEmitter:
    """Test the flat JS module."""

    def test_flat_export(self, simple_context):
        content = JsModuleEmitter(_platform(Target.JS, "tokens.js")).render(simple_context)

        assert _js_body(content) == {
            "refColorWhite": "#ffffff",
            "refSpace4": 4,
            "sysColorBg": "#ffffff",
            "sysSpaceSm": 4,
        }
        assert list(_js_body(content))[0] == "refColorWhite"

    def test_flat_name_collision(self, resolve_tree):
        context = EmitContext(
            tokens=resolve_tree({"a": {"b-c": {"$value": 1}, "bC": {"$value": 2}}})
        )
        with pytest.raises(EmitError, match="both map to JS name 'aBC'"):
            JsModuleEmitter(_platform(Target.JS, "tokens.js")).render(context)


class TestTypeScriptEmitter:
    """Test the declaration file."""

    def test_literal_types(self, resolve_tree):
        context = EmitContext(tokens=resolve_tree({**SIMPLE, **TYPOGRAPHY}))
        content = TypeScriptEmitter(_platform(Target.TYPESCRIPT, "tokens.d.ts")).render(context)

        assert content.startswith(GENERATED_HEADER + "\nexport declare const tokens: {\n")
        assert '  readonly refColorWhite: "#ffffff";\n' in content
        assert "  readonly refSpace4: 4;\n" in content
        assert "    readonly fontFamily: readonly string[];\n" in content
        assert "    readonly lineHeight: 1.5;\n" in content
        assert content.endswith(
            "export type Tokens = typeof tokens;\nexport type TokenName = keyof Tokens;\n"
        )


class TestJsonNestedEmitter:
    """Test the nested JSON tree."""

    def test_nested_tree(self, simple_context):
        content = JsonNestedEmitter(_platform(Target.JSON, "tokens.json")).render(simple_context)

        assert json.loads(content) == {
            "ref": {"color": {"white": "#ffffff"}, "space": {"4": 4}},
            "sys": {"color": {"bg": "#ffffff"}, "space": {"sm": 4}},
        }
        assert simple_context.mappings.get("ref.space.4")["json"]["name"] == "tokens.ref.space.4"

    def test_dict_leaf_is_not_a_group(self, resolve_tree):
        context = EmitContext(tokens=resolve_tree(TYPOGRAPHY))
        content = JsonNestedEmitter(_platform(Target.JSON, "tokens.json")).render(context)
        assert json.loads(content)["sys"]["typography"]["body"]["fontSize"] == 16

    def test_token_and_group_collision(self, make_layer):
        layer = make_layer(
            "reference",
            100,
            {"a.json": {"a": {"$value": 1}}, "b.json": {"a": {"b": {"$value": 2}}}},
        )
        context = EmitContext(tokens=resolve(merge([layer])))

        with pytest.raises(EmitError, match="is a token"):
            JsonNestedEmitter(_platform(Target.JSON, "tokens.json")).render(context)


# =============================================================================
# Docs and mappings
# =============================================================================


class TestDocsEmitter:
    """Test the documentation catalogue."""

    def test_entry(self, simple_context):
        content = DocsEmitter(_platform(Target.DOCS, "docs.json")).render(simple_context)
        catalogue = json.loads(content)

        assert set(catalogue) == {"ref", "sys", "cmp", "metadata"}
        assert catalogue["cmp"] == {}
        assert catalogue["metadata"] == {"totalTokens": 4}

        (entry,) = catalogue["sys"]["color"]
        assert entry == {
            "name": "sysColorBg",
            "path": "sys.color.bg",
            "type": "color",
            "description": "",
            "deprecated": False,
            "originalValue": "{ref.color.white}",
            "value": "#ffffff",
            "cssVariable": "--sys-color-bg",
            "jsPath": "tokens.sys.color.bg",
            "jsFlat": "sysColorBg",
            "hasReferences": True,
            "references": [{"path": "ref.color.white", "value": "#ffffff", "type": "color"}],
            "referenceChain": [
                {"from": "sys.color.bg", "to": "ref.color.white", "value": "#ffffff"}
            ],
        }

    def test_reference_warnings_join_diagnostics(self, resolve_tree):
        context = EmitContext(
            tokens=resolve_tree(
                {
                    "ref": {"ease": {"$type": "cubicBezier", "$value": [1, 2]}},
                    "sys": {"ease": {"$value": "{ref.ease}"}},
                }
            )
        )
        emitter = DocsEmitter(_platform(Target.DOCS, "docs.json", include_tiers=["sys"]))

        emitter.render(context)

        paths = [warning.path for warning in context.diagnostics]
        assert "sys.ease" in paths
        assert "ref.ease" in paths

    def test_literal_entry_has_no_chain(self, simple_context):
        catalogue = json.loads(
            DocsEmitter(_platform(Target.DOCS, "docs.json")).render(simple_context)
        )
        (entry,) = catalogue["ref"]["space"]
        assert entry["value"] == "4px"
        assert entry["hasReferences"] is False
        assert "referenceChain" not in entry
        assert catalogue["ref"]["color"][0]["description"] == "Paper"

    def test_expanded_value_and_unknown_tier(self, resolve_tree):
        context = EmitContext(tokens=resolve_tree({**TYPOGRAPHY, "misc": {"x": {"$value": 1}}}))
        catalogue = json.loads(DocsEmitter(_platform(Target.DOCS, "docs.json")).render(context))

        (entry,) = catalogue["sys"]["typography"]
        assert entry["expandedValue"] == {
            "fontFamily": ["Inter", "Helvetica Neue", "sans-serif"],
            "fontSize": "1rem",
            "fontWeight": 400,
            "lineHeight": 1.5,
        }
        assert "misc" not in catalogue
        assert catalogue["metadata"]["totalTokens"] == 1


class TestMappingsEmitter:
    """Test the mappings document."""

    def test_collects_other_emitters(self, simple_context):
        CssEmitter(_platform(Target.CSS, "tokens.css")).render(simple_context)
        JsModuleEmitter(_platform(Target.JS, "tokens.js")).render(simple_context)

        document = json.loads(
            MappingsEmitter(_platform(Target.MAPPINGS, "mappings.json")).render(simple_context)
        )

        assert document["metadata"] == {"totalTokens": 4}
        assert document["tokens"]["sys.color.bg"] == {
            "css": {"name": "--sys-color-bg", "file": "tokens.css"},
            "js": {"name": "sysColorBg", "file": "tokens.js"},
        }


class TestGetEmitter:
    @pytest.mark.parametrize(
        ("target", "emitter_cls"),
        [
            (Target.CSS, CssEmitter),
            (Target.JS, JsModuleEmitter),
            (Target.TYPESCRIPT, TypeScriptEmitter),
            (Target.JSON, JsonNestedEmitter),
            (Target.DOCS, DocsEmitter),
            (Target.MAPPINGS, MappingsEmitter),
        ],
    )
    def test_dispatch(self, target, emitter_cls):
        emitter = get_emitter(_platform(target, "out"))
        assert isinstance(emitter, emitter_cls)
        assert emitter.filename == "out"

    def test_emit_wraps_artifact(self, simple_context):
        artifact = get_emitter(_platform(Target.JSON, "tokens.json")).emit(simple_context)
        assert artifact.filename == "tokens.json"
        assert artifact.target is Target.JSON
        assert artifact.content.endswith("\n")
