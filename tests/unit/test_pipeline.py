"""End-to-end tests for the build pipeline on an on-disk project."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tokenweave.core.config_loader import CONFIG_FILE
from tokenweave.core.emitters import GENERATED_HEADER
from tokenweave.core.errors import EmitError, UnresolvedReferenceError
from tokenweave.core.ir import BuildConfig, PlatformSpec, Target
from tokenweave.core.pipeline import build_project, build_tokens, write_artifacts

FAMILY = 'Inter, "Helvetica Neue", sans-serif'


@pytest.fixture
def result(token_project: Path):
    return build_tokens(BuildConfig(), token_project, write=False)


# =============================================================================
# Stages
# =============================================================================


class TestBuildStages:
    """Test themes, overrides and diagnostics."""

    def test_themes_resolved(self, result):
        assert list(result.themes) == ["light", "dark"]
        assert result.base_theme == "light"
        assert result.token_count == 21
        light = result.themes["light"].resolved
        dark = result.themes["dark"].resolved
        assert light["sys.color.text.primary"].resolved_value == "#111111"
        assert dark["sys.color.text.primary"].resolved_value == "#ffffff"

    def test_dark_overrides(self, result):
        assert result.overrides["dark"].paths == [
            "sys.color.surface.default",
            "sys.color.text.primary",
        ]

    def test_font_weights_normalized(self, result):
        resolved = result.base.resolved
        assert "ref.fontWeight.regular" in resolved
        assert "ref.fontWeight.400" not in resolved
        assert resolved["sys.typography.body"].resolved_value["fontWeight"] == "regular"

    def test_no_diagnostics(self, result):
        assert result.diagnostics == []

    def test_artifact_order(self, result):
        assert [artifact.filename for artifact in result.artifacts] == [
            "css/tokens.css",
            "css/internal-all-tokens.css",
            "tokens.js",
            "tokens.d.ts",
            "tokens.json",
            "docs/tokens-reference.json",
            "docs/token-mappings.json",
        ]

    def test_no_themes_configured(self, token_project: Path):
        result = build_tokens(BuildConfig(themes=[]), token_project, write=False)

        assert list(result.themes) == [""]
        assert result.overrides == {}
        css = result.artifact("css/tokens.css").content
        assert "data-theme" not in css


# =============================================================================
# Artifacts
# =============================================================================


class TestArtifacts:
    """Spot checks of each rendered format."""

    def test_public_css(self, result):
        css = result.artifact("css/tokens.css").content

        assert css.startswith(GENERATED_HEADER + "\n:root {\n")
        assert "--ref-" not in css.split("[data-theme")[0]
        assert "  --sys-color-action-primary-default: rgb(0, 102, 255);\n" in css
        assert "  --sys-spacing-sm: 4px;\n" in css
        assert "  --sys-shadow-card: 0px 2px 4px 0px rgba(0, 0, 0, 0.5);\n" in css
        assert f"  --sys-typography-body: regular 16px/1.5 {FAMILY};\n" in css
        assert "  --cmp-button-background-disabled: #ffffff;\n" in css

    def test_css_theme_blocks(self, result):
        css = result.artifact("css/tokens.css").content

        dark_block = css.split('[data-theme="dark"] {\n')[1].split("}\n")[0]
        assert dark_block == (
            "  --sys-color-surface-default: #111111;\n"
            "  --sys-color-text-primary: #ffffff;\n"
        )
        assert '@media (prefers-color-scheme: dark) {\n  :root:not([data-theme="light"]) {' in css

    def test_internal_css_has_every_tier(self, result):
        css = result.artifact("css/internal-all-tokens.css").content
        assert "  --ref-spacing-16: 16px;\n" in css
        assert "  --ref-color-shadow: rgba(0, 0, 0, 0.5);\n" in css

    def test_js_module(self, result):
        js = result.artifact("tokens.js").content
        assert '"cmpButtonBackgroundDefault": "#0066ff"' in js
        assert '"refSpacing16": 16' in js
        assert '"refColorShadow": "#00000080"' in js

    def test_nested_json(self, result):
        tree = json.loads(result.artifact("tokens.json").content)
        assert tree["sys"]["color"]["text"]["primary"] == "#111111"
        assert tree["sys"]["shadow"]["card"]["shadowRadius"] == 2

    def test_docs_catalogue(self, result):
        catalogue = json.loads(result.artifact("docs/tokens-reference.json").content)

        text = catalogue["sys"]["color"][0]
        assert text["path"] == "sys.color.action.primary.default"
        entries = {entry["path"]: entry for entry in catalogue["sys"]["color"]}
        primary = entries["sys.color.text.primary"]
        assert primary["description"] == "Body text"
        assert primary["referenceChain"] == [
            {"from": "sys.color.text.primary", "to": "ref.color.neutral.900", "value": "#111111"}
        ]
        assert catalogue["metadata"]["totalTokens"] == 21

        shadow = catalogue["sys"]["shadow"][0]
        assert shadow["references"][0]["property"] == "color"

    def test_mappings(self, result):
        document = json.loads(result.artifact("docs/token-mappings.json").content)
        entry = document["tokens"]["sys.color.text.primary"]

        assert set(entry) == {"css", "js", "typescript", "json"}
        assert entry["css"]["name"] == "--sys-color-text-primary"
        assert entry["js"] == {"name": "sysColorTextPrimary", "file": "tokens.js"}
        assert entry["json"]["name"] == "tokens.sys.color.text.primary"
        assert result.mappings.get("sys.color.text.primary") == entry


# =============================================================================
# Writing
# =============================================================================


class TestWriting:
    """Test the all-or-nothing write stage."""

    def test_writes_and_skips_unchanged(self, token_project: Path):
        first = build_tokens(BuildConfig(), token_project)
        assert len(first.written) == 7
        assert (token_project / "dist" / "css" / "tokens.css").is_file()

        second = build_tokens(BuildConfig(), token_project)
        assert second.written == []

    def test_dry_run_writes_nothing(self, result, token_project: Path):
        assert result.written == []
        assert not (token_project / "dist").exists()

    def test_failed_build_writes_nothing(self, token_project: Path, write_tokens):
        write_tokens(
            token_project / "src" / "tokens",
            "component/broken.json",
            {"cmp": {"card": {"bg": {"$value": "{sys.color.nope}"}}}},
        )

        with pytest.raises(UnresolvedReferenceError):
            build_tokens(BuildConfig(), token_project)
        assert not (token_project / "dist").exists()

    def test_duplicate_filenames_rejected(self, token_project: Path):
        config = BuildConfig(
            platforms=[
                PlatformSpec(target=Target.JS, filename="out.js"),
                PlatformSpec(target=Target.JSON, filename="out.js"),
            ]
        )
        with pytest.raises(EmitError, match="out.js"):
            build_tokens(config, token_project, write=False)

    def test_write_artifacts_creates_directories(self, result, tmp_path: Path):
        written = write_artifacts(result.artifacts[:1], tmp_path / "nested" / "out")
        assert written == [tmp_path / "nested" / "out" / "css" / "tokens.css"]

    def test_build_project_reads_config(self, token_project: Path):
        (token_project / CONFIG_FILE).write_text("output_dir: build\n", encoding="utf-8")

        built = build_project(token_project)

        assert (token_project / "build" / "tokens.js").is_file()
        assert all(path.is_relative_to(token_project / "build") for path in built.written)
