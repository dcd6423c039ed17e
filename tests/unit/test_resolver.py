"""
Tests for module resolution.
"""

from unittest.mock import Mock

from deskstat.theme.models import InstalledPackage
from deskstat.theme.resolver import DEFAULT_MODULE_BLACKLIST, ModuleResolver


class TestModuleResolver:
    """Test suite for ModuleResolver."""

    def test_resolves_installed_modules(self, tmp_path, make_package, package_locator):
        """Installed modules map to their install directories."""
        acme = make_package("acme-css")
        jquery = make_package("jquery")

        modules = ModuleResolver(package_locator).resolve(["acme-css", "jquery"], tmp_path)

        assert set(modules) == {"acme-css", "jquery"}
        assert modules["acme-css"].install_dir == acme.resolve()
        assert modules["jquery"].install_dir == jquery.resolve()

    def test_missing_modules_are_absent(self, tmp_path, make_package, package_locator):
        """Names without an installed package are left out."""
        make_package("acme-css")

        modules = ModuleResolver(package_locator).resolve(["acme-css", "nope"], tmp_path)

        assert list(modules) == ["acme-css"]

    def test_blacklisted_modules_are_not_searched(self):
        """Blacklisted names never reach the package search."""
        locator = Mock()
        locator.find.return_value = []

        ModuleResolver(locator).resolve(["electron", "lodash", "moment"], search_root=None)

        assert locator.find.call_args[0][0] == ["moment"]

    def test_only_blacklisted_skips_search(self):
        """Nothing is searched when every name is blacklisted."""
        locator = Mock()

        assert ModuleResolver(locator).resolve(["electron"], search_root=None) == {}
        locator.find.assert_not_called()

    def test_single_batched_search(self):
        """All names are looked up with one search."""
        locator = Mock()
        locator.find.return_value = []

        ModuleResolver(locator).resolve(["a", "b", "a", "c"], search_root=None)

        locator.find.assert_called_once()
        assert locator.find.call_args[0][0] == ["a", "b", "c"]

    def test_first_match_wins(self, tmp_path):
        """The first package found for a name is used."""
        locator = Mock()
        locator.find.return_value = [
            InstalledPackage(name="a", install_dir=tmp_path / "local" / "a"),
            InstalledPackage(name="a", install_dir=tmp_path / "global" / "a", is_global=True),
        ]

        modules = ModuleResolver(locator).resolve(["a"], search_root=tmp_path)

        assert modules["a"].install_dir == tmp_path / "local" / "a"

    def test_filter_names(self):
        """Duplicates and blacklisted names are dropped, order is kept."""
        resolver = ModuleResolver(Mock(), blacklist=["x"])

        assert resolver.filter_names(["b", "x", "a", "b"]) == ["b", "a"]

    def test_default_blacklist(self):
        assert set(DEFAULT_MODULE_BLACKLIST) == {"electron", "lodash"}
