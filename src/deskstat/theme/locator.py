"""
Theme location: turn a theme reference into an entry file and base directory.
"""

import logging
from concurrent.futures import Executor
from pathlib import Path
from typing import List, Optional, Sequence

from ..utils.errors import ThemeNotFoundError
from .models import InstalledPackage, ResolvedTheme
from .packages import PackageLocator
from .tasks import run_concurrently

logger = logging.getLogger(__name__)

# Entry file used when a theme package has no "main" in its manifest
DEFAULT_THEME_MAIN = "index.html"


class ThemeLocator:
    """
    Resolves a theme reference that is either a file path or a package name.

    A path that names an existing regular file always wins. Otherwise the
    first installed package with exactly that name is used, local installs
    before global ones.
    """

    def __init__(
        self,
        package_locator: PackageLocator,
        search_roots: Sequence[Path],
        executor: Optional[Executor] = None,
    ):
        """
        Initialize the theme locator.

        Args:
            package_locator: Locator used to search installed packages
            search_roots: Directories whose ``node_modules`` trees are searched
            executor: Pool for running the path check and package search together
        """
        self.package_locator = package_locator
        self.search_roots = [Path(root) for root in search_roots]
        self.executor = executor

    def locate(self, reference: str) -> ResolvedTheme:
        """
        Resolve ``reference`` to a theme.

        Raises:
            ThemeNotFoundError: If neither a file nor a package matches
        """
        if not reference:
            raise ThemeNotFoundError(reference, "empty theme reference")

        path, packages = run_concurrently(
            self.executor,
            lambda: self._check_path(reference),
            lambda: self._search_packages(reference),
        )

        if path is not None:
            logger.debug(f"Using theme path {path}")
            return ResolvedTheme(entry_file=path, base_dir=path.parent)

        if packages:
            package = packages[0]
            if len(packages) > 1:
                logger.debug(
                    f"{len(packages)} packages named '{reference}' found, using {package.install_dir}"
                )
            return self._from_package(reference, package)

        raise ThemeNotFoundError(reference)

    def _check_path(self, reference: str) -> Optional[Path]:
        path = Path(reference).expanduser()
        try:
            if path.is_file():
                return path.resolve()
        except OSError as e:
            logger.debug(f"Theme path check failed for {path}: {e}")
        return None

    def _search_packages(self, reference: str) -> List[InstalledPackage]:
        found: List[InstalledPackage] = []
        seen = set()
        for index, root in enumerate(self.search_roots):
            # Global directories are the same for every root, search them once
            for package in self.package_locator.find(
                [reference], cwd=root, global_=(index == len(self.search_roots) - 1)
            ):
                if package.install_dir not in seen:
                    seen.add(package.install_dir)
                    found.append(package)
        return sorted(found, key=lambda p: p.is_global)

    def _from_package(self, reference: str, package: InstalledPackage) -> ResolvedTheme:
        entry = package.install_dir / (package.main or DEFAULT_THEME_MAIN)
        if not entry.is_file():
            raise ThemeNotFoundError(
                reference, f"package entry file {entry} does not exist"
            )

        logger.debug(f"Using theme package {package.name} with HTML path {entry}")
        return ResolvedTheme(
            entry_file=entry.resolve(), base_dir=entry.resolve().parent, package_name=package.name
        )
