"""
Tests for asset discovery and local script pre-loading.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from deskstat.theme.discovery import AssetDiscoverer, LocalScriptScanner, is_package_name
from deskstat.theme.models import AssetKind, AssetMarker
from deskstat.utils.errors import AssetReadError

MARKUP = """<html>
<head>
<link rel="stylesheet" href="<%=paths.modules%>/acme-css/style.css">
<script src="<%=paths.modules%>/jquery/dist/jquery.js"></script>
<script src="<%=paths.theme%>/widget.js"></script>
</head>
<body></body>
</html>
"""


class TestAssetDiscoverer:
    """Test suite for AssetDiscoverer."""

    @pytest.fixture
    def executor(self):
        with ThreadPoolExecutor(max_workers=3) as executor:
            yield executor

    def test_replaces_tags_with_placeholders(self):
        """Every asset tag is replaced by its placeholder."""
        result = AssetDiscoverer().discover(MARKUP)

        assert "<link" not in result.markup
        assert "<script" not in result.markup
        assert "<!-- CSS FOR [acme-css/style.css] -->" in result.markup
        assert "<!-- JS FOR [jquery/dist/jquery.js] -->" in result.markup
        assert "<!-- JS LOCAL FOR [widget.js] -->" in result.markup
        assert result.markup.startswith("<html>\n<head>\n")
        assert result.markup.endswith("</head>\n<body></body>\n</html>\n")

    def test_markers_in_document_order(self):
        """Markers come back in the order the tags appear."""
        result = AssetDiscoverer().discover(MARKUP)

        assert [m.kind for m in result.markers] == [
            AssetKind.CSS,
            AssetKind.BUNDLED_JS,
            AssetKind.LOCAL_JS,
        ]
        assert [m.label for m in result.markers] == [
            "acme-css/style.css",
            "jquery/dist/jquery.js",
            "widget.js",
        ]

    def test_module_refs_from_package_assets_only(self):
        """Only CSS and bundled JS tags contribute module references."""
        result = AssetDiscoverer().discover(MARKUP)

        assert result.module_refs == ["acme-css", "jquery"]

    def test_concurrent_scans_match_sequential(self, executor):
        """Scanning on a pool gives the same result as scanning inline."""
        sequential = AssetDiscoverer().discover(MARKUP)
        concurrent = AssetDiscoverer(executor=executor).discover(MARKUP)

        assert concurrent.markup == sequential.markup
        assert [m.placeholder for m in concurrent.markers] == [
            m.placeholder for m in sequential.markers
        ]

    def test_duplicate_references_get_distinct_placeholders(self):
        """The same asset referenced twice gets numbered placeholders."""
        markup = (
            '<link rel="stylesheet" href="<%=paths.modules%>/a/a.css">\n'
            '<link rel="stylesheet" href="<%=paths.modules%>/a/a.css">\n'
        )

        result = AssetDiscoverer().discover(markup)

        assert [m.placeholder for m in result.markers] == [
            "<!-- CSS FOR [a/a.css] -->",
            "<!-- CSS FOR [a/a.css] #2 -->",
        ]

    def test_counts_by_kind(self):
        """N CSS, M bundled and K local references give N+M+K distinct placeholders."""
        markup = "\n".join(
            ['<link rel="stylesheet" href="<%=paths.modules%>/c/' + f"{i}.css\">" for i in range(2)]
            + ['<script src="<%=paths.modules%>/j/' + f"{i}.js\"></script>" for i in range(3)]
            + ['<script src="<%=paths.theme%>/' + f"{i}.js\"></script>" for i in range(4)]
        )

        result = AssetDiscoverer().discover(markup)

        assert len(result.markers) == 9
        assert len({m.placeholder for m in result.markers}) == 9
        assert len(result.markers_of(AssetKind.CSS)) == 2
        assert len(result.markers_of(AssetKind.BUNDLED_JS)) == 3
        assert len(result.markers_of(AssetKind.LOCAL_JS)) == 4

    def test_rediscovery_finds_nothing(self):
        """Placeholders are not asset tags, so a second pass changes nothing."""
        first = AssetDiscoverer().discover(MARKUP)

        second = AssetDiscoverer().discover(first.markup)

        assert second.markers == []
        assert second.markup == first.markup

    def test_tags_sharing_a_line(self):
        """Adjacent tags on one line are each discovered and replaced."""
        markup = (
            '<script src="<%=paths.modules%>/jquery/dist/jquery.js"></script>'
            '<script src="<%=paths.theme%>/widget.js"></script>'
            '<link rel="icon" href="favicon.ico">'
            '<link rel="stylesheet" href="<%=paths.modules%>/acme-css/style.css">'
        )

        result = AssetDiscoverer().discover(markup)

        assert [(m.kind, m.label) for m in result.markers] == [
            (AssetKind.BUNDLED_JS, "jquery/dist/jquery.js"),
            (AssetKind.LOCAL_JS, "widget.js"),
            (AssetKind.CSS, "acme-css/style.css"),
        ]
        assert result.markup == (
            "<!-- JS FOR [jquery/dist/jquery.js] -->"
            "<!-- JS LOCAL FOR [widget.js] -->"
            '<link rel="icon" href="favicon.ico">'
            "<!-- CSS FOR [acme-css/style.css] -->"
        )

    def test_markup_without_assets_is_unchanged(self):
        """Markup without asset tags passes through untouched."""
        markup = "<html><body><p>Hello</p></body></html>"

        result = AssetDiscoverer().discover(markup)

        assert result.markup == markup
        assert result.markers == []
        assert result.module_refs == []


class TestLocalScriptScanner:
    """Test suite for LocalScriptScanner."""

    def _marker(self, relative_file):
        return AssetMarker(
            kind=AssetKind.LOCAL_JS,
            relative_file=relative_file,
            placeholder=f"<!-- JS LOCAL FOR [{relative_file}] -->",
        )

    def test_loads_content_and_collects_requires(self, theme_dir):
        """Local scripts are read and their package requires collected."""
        (theme_dir / "widget.js").write_text(
            "var moment = require('moment');\nvar fs = require(\"fs-extra\");\n"
        )
        marker = self._marker("widget.js")

        names = LocalScriptScanner().scan([marker], theme_dir)

        assert names == ["moment", "fs-extra"]
        assert marker.content.startswith("var moment")

    def test_relative_requires_are_not_packages(self, theme_dir):
        """Relative and absolute requires are left out of the module list."""
        (theme_dir / "widget.js").write_text(
            "require('./helpers');\nrequire('../shared');\nrequire('/abs/path');\nrequire('d3');\n"
        )

        names = LocalScriptScanner().scan([self._marker("widget.js")], theme_dir)

        assert names == ["d3"]

    def test_ignores_other_kinds(self, theme_dir):
        """CSS and bundled JS markers are not read here."""
        css = AssetMarker(
            kind=AssetKind.CSS, relative_file="style.css", placeholder="x", module="acme"
        )

        assert LocalScriptScanner().scan([css], theme_dir) == []
        assert css.content is None

    def test_missing_script_raises(self, theme_dir):
        """A missing local script aborts with the script path."""
        with pytest.raises(AssetReadError) as exc_info:
            LocalScriptScanner().scan([self._marker("missing.js")], theme_dir)

        assert exc_info.value.path == theme_dir / "missing.js"
        assert "JS local pre-load" in str(exc_info.value)

    def test_concurrent_loading(self, theme_dir):
        """Several scripts load concurrently, results keep marker order."""
        for index in range(5):
            (theme_dir / f"s{index}.js").write_text(f"require('mod{index}');")
        markers = [self._marker(f"s{index}.js") for index in range(5)]

        with ThreadPoolExecutor(max_workers=4) as executor:
            names = LocalScriptScanner(executor=executor).scan(markers, theme_dir)

        assert names == [f"mod{index}" for index in range(5)]
        assert all(m.content for m in markers)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("moment", True),
        ("@scope/pkg", True),
        ("./local", False),
        ("../parent", False),
        ("/absolute", False),
    ],
)
def test_is_package_name(name, expected):
    """Relative and absolute paths are not package names."""
    assert is_package_name(name) is expected
