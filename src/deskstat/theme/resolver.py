"""
Module resolution: map referenced package names to install directories.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Sequence

from .models import ModuleMap, ResolvedModule
from .packages import PackageLocator

logger = logging.getLogger(__name__)

# Globals injected by the host runtime, never resolved as packages
DEFAULT_MODULE_BLACKLIST = ("electron", "lodash")


class ModuleResolver:
    """Resolves module references with one batched package search."""

    def __init__(
        self,
        package_locator: PackageLocator,
        blacklist: Sequence[str] = DEFAULT_MODULE_BLACKLIST,
    ):
        self.package_locator = package_locator
        self.blacklist = frozenset(blacklist)

    def filter_names(self, names: Iterable[str]) -> List[str]:
        """Deduplicate ``names`` keeping first-seen order and drop blacklisted ones."""
        return [name for name in dict.fromkeys(names) if name not in self.blacklist]

    def resolve(self, names: Iterable[str], search_root: Path) -> ModuleMap:
        """
        Resolve every name that has an installed package.

        Names without a match are simply absent from the result; the splice
        phase reports them if they turn out to be needed.
        """
        wanted = self.filter_names(names)
        if not wanted:
            return {}

        logger.debug(f"Find modules {', '.join(wanted)}")

        resolved: ModuleMap = {}
        for package in self.package_locator.find(wanted, cwd=search_root):
            if package.name not in resolved:
                resolved[package.name] = ResolvedModule(
                    name=package.name, install_dir=package.install_dir
                )

        missing = [name for name in wanted if name not in resolved]
        if missing:
            logger.debug(f"Unresolved modules: {', '.join(missing)}")

        return resolved
