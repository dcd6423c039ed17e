"""
Tests for the splice engine.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from deskstat.theme.models import AssetKind, AssetMarker, ResolvedModule
from deskstat.theme.splice import SpliceEngine, apply_replacements
from deskstat.utils.errors import AssetReadError, ModuleResolutionError


def css_marker(module, relative_file):
    return AssetMarker(
        kind=AssetKind.CSS,
        relative_file=relative_file,
        module=module,
        placeholder=f"<!-- CSS FOR [{module}/{relative_file}] -->",
    )


def js_marker(module, relative_file):
    return AssetMarker(
        kind=AssetKind.BUNDLED_JS,
        relative_file=relative_file,
        module=module,
        placeholder=f"<!-- JS FOR [{module}/{relative_file}] -->",
    )


def local_marker(relative_file, content):
    return AssetMarker(
        kind=AssetKind.LOCAL_JS,
        relative_file=relative_file,
        placeholder=f"<!-- JS LOCAL FOR [{relative_file}] -->",
        content=content,
    )


class TestSpliceEngine:
    """Test suite for SpliceEngine."""

    @pytest.fixture
    def modules(self, tmp_path, make_package):
        acme = make_package("acme-css", {"style.css": "body{color:red}"})
        jquery = make_package("jquery", {"dist/jquery.js": "window.$ = {};"})
        moment = make_package("moment")
        return {
            "acme-css": ResolvedModule("acme-css", acme),
            "jquery": ResolvedModule("jquery", jquery),
            "moment": ResolvedModule("moment", moment),
        }

    def test_inlines_css(self, modules):
        """CSS content follows its placeholder wrapped in a style tag."""
        marker = css_marker("acme-css", "style.css")

        result = SpliceEngine().splice(marker.placeholder, [marker], modules)

        assert result == "<!-- CSS FOR [acme-css/style.css] -->\n<style>body{color:red}</style>"
        assert marker.content == "body{color:red}"

    def test_inlines_bundled_js(self, modules):
        """Bundled JS is wrapped in a script tag."""
        marker = js_marker("jquery", "dist/jquery.js")

        result = SpliceEngine().splice(f"<head>{marker.placeholder}</head>", [marker], modules)

        assert result == (
            "<head><!-- JS FOR [jquery/dist/jquery.js] -->\n"
            "<script>window.$ = {};</script></head>"
        )

    def test_local_requires_are_rewritten(self, modules):
        """Package requires point at the install directory, quotes are kept."""
        marker = local_marker("w.js", "var m = require('moment');")

        result = SpliceEngine().splice(marker.placeholder, [marker], modules)

        assert f"require('{modules['moment'].install_dir}')" in result
        assert result.startswith("<!-- JS LOCAL FOR [w.js] -->\n<script>")
        assert result.endswith("</script>")

    def test_blacklisted_and_relative_requires_untouched(self, modules):
        """Blacklisted and relative requires survive unchanged."""
        content = "require(\"electron\"); require('lodash'); require('./util');"
        marker = local_marker("w.js", content)

        result = SpliceEngine().splice(marker.placeholder, [marker], modules)

        assert content in result

    def test_unresolved_local_require(self, modules):
        """An unresolved require in a local script names the script."""
        marker = local_marker("widget.js", "require('left-pad');")

        with pytest.raises(ModuleResolutionError) as exc_info:
            SpliceEngine().splice(marker.placeholder, [marker], modules)

        assert exc_info.value.module == "left-pad"
        assert exc_info.value.requested_by == "widget.js"

    def test_unresolved_package_asset(self, modules):
        """A CSS reference into a missing module fails with that module name."""
        marker = css_marker("foo-theme-icons", "icons.css")

        with pytest.raises(ModuleResolutionError, match='Cannot find module "foo-theme-icons"'):
            SpliceEngine().splice(marker.placeholder, [marker], modules)

    def test_missing_asset_file(self, modules):
        """A resolved module without the referenced file fails with its path."""
        marker = css_marker("acme-css", "missing.css")

        with pytest.raises(AssetReadError) as exc_info:
            SpliceEngine().splice(marker.placeholder, [marker], modules)

        assert exc_info.value.path == modules["acme-css"].install_dir / "missing.css"

    def test_all_kinds_concurrently(self, modules):
        """The three passes run on a pool and every placeholder is filled."""
        markers = [
            css_marker("acme-css", "style.css"),
            js_marker("jquery", "dist/jquery.js"),
            local_marker("w.js", "require('moment');"),
        ]
        markup = "\n".join(m.placeholder for m in markers)

        with ThreadPoolExecutor(max_workers=3) as executor:
            result = SpliceEngine(executor=executor).splice(markup, markers, modules)

        assert result.count("<style>") == 1
        assert result.count("<script>") == 2
        for marker in markers:
            assert result.count(marker.placeholder) == 1

    def test_custom_blacklist(self, modules):
        """A configured blacklist replaces the default one."""
        marker = local_marker("w.js", "require('jquery'); require('electron');")
        engine = SpliceEngine(blacklist=["jquery"])

        with pytest.raises(ModuleResolutionError, match="electron"):
            engine.splice(marker.placeholder, [marker], modules)


class TestApplyReplacements:
    """Test suite for apply_replacements."""

    def test_replaces_first_occurrence_only(self):
        """Later copies of a placeholder are left alone."""
        result = apply_replacements("A <!-- X --> B <!-- X -->", {"<!-- X -->": "x"})

        assert result == "A x B <!-- X -->"

    def test_prefix_placeholders(self):
        """A placeholder that is a prefix of another does not steal its match."""
        replacements = {
            "<!-- CSS FOR [a/a.css] -->": "one",
            "<!-- CSS FOR [a/a.css] #2 -->": "two",
        }
        markup = "<!-- CSS FOR [a/a.css] -->|<!-- CSS FOR [a/a.css] #2 -->"

        assert apply_replacements(markup, replacements) == "one|two"

    def test_replacement_text_is_not_rescanned(self):
        """Inlined content containing a placeholder is not replaced again."""
        replacements = {"<!-- A -->": "<!-- B -->", "<!-- B -->": "b"}

        assert apply_replacements("<!-- A -->", replacements) == "<!-- B -->"

    def test_no_replacements(self):
        assert apply_replacements("unchanged", {}) == "unchanged"
