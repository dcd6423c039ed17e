"""
Locate installed Node-style packages (themes and their assets).

Packages live in ``node_modules`` directories, either local to a project
(found by walking up from a search directory) or global (configured
directories, ``NODE_PATH`` and ``npm root -g``).
"""

import json
import logging
import os
import subprocess
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .models import InstalledPackage

logger = logging.getLogger(__name__)

MODULES_DIR_NAME = "node_modules"
MANIFEST_NAME = "package.json"


class PackageLocator:
    """
    Finds installed packages by exact name.

    Local roots are searched before global roots, so callers that take the
    first match per name prefer a package installed next to the theme.
    """

    def __init__(
        self,
        global_dirs: Optional[Sequence[Path]] = None,
        use_npm: bool = True,
    ):
        """
        Initialize the locator.

        Args:
            global_dirs: Extra global package directories (searched first among globals)
            use_npm: Ask ``npm root -g`` for the global directory
        """
        self.global_dirs: List[Path] = [Path(d).expanduser() for d in (global_dirs or [])]
        self.use_npm = use_npm
        self._npm_root: Optional[Path] = None
        self._npm_checked = False
        self._npm_lock = threading.Lock()

    def local_roots(self, cwd: Path) -> List[Path]:
        """Return every ``node_modules`` directory from ``cwd`` up to the filesystem root."""
        roots = []
        current = Path(cwd).expanduser().resolve()
        for directory in [current, *current.parents]:
            candidate = directory / MODULES_DIR_NAME
            if candidate.is_dir():
                roots.append(candidate)
        return roots

    def global_roots(self) -> List[Path]:
        """Return global package directories in search order."""
        roots = list(self.global_dirs)

        for entry in os.environ.get("NODE_PATH", "").split(os.pathsep):
            if entry:
                roots.append(Path(entry).expanduser())

        npm_root = self._query_npm_root()
        if npm_root:
            roots.append(npm_root)

        return [root for root in _unique_paths(roots) if root.is_dir()]

    def find(
        self, names: Iterable[str], cwd: Path, local: bool = True, global_: bool = True
    ) -> List[InstalledPackage]:
        """
        Find installed packages matching any of ``names``.

        Args:
            names: Exact package names to look for
            cwd: Directory the local search starts from
            local: Search ``node_modules`` directories above ``cwd``
            global_: Search global package directories

        Returns:
            Every match in search order (local before global)
        """
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return []

        roots = []
        if local:
            roots.extend((root, False) for root in self.local_roots(cwd))
        if global_:
            local_set = {root for root, _ in roots}
            roots.extend((root, True) for root in self.global_roots() if root not in local_set)

        logger.debug(f"Searching {len(roots)} package roots for: {', '.join(wanted)}")

        found = []
        for root, is_global in roots:
            for name in wanted:
                package = self._read_package(root / name, name, is_global)
                if package:
                    found.append(package)
        return found

    def _read_package(
        self, package_dir: Path, name: str, is_global: bool
    ) -> Optional[InstalledPackage]:
        """Read a candidate package directory, returning None if it isn't ``name``."""
        manifest_path = package_dir / MANIFEST_NAME
        if not manifest_path.is_file():
            return None

        try:
            manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Skipping unreadable package manifest {manifest_path}: {e}")
            return None

        if not isinstance(manifest, dict) or manifest.get("name") != name:
            return None

        main = manifest.get("main")
        return InstalledPackage(
            name=name,
            install_dir=package_dir.resolve(),
            main=main if isinstance(main, str) and main else None,
            is_global=is_global,
        )

    def _query_npm_root(self) -> Optional[Path]:
        """Ask npm for its global root once, caching the answer."""
        if not self.use_npm:
            return None

        with self._npm_lock:
            if self._npm_checked:
                return self._npm_root
            self._npm_checked = True

            try:
                result = subprocess.run(
                    ["npm", "root", "-g"], capture_output=True, text=True, timeout=10
                )
                if result.returncode == 0 and result.stdout.strip():
                    self._npm_root = Path(result.stdout.strip())
                    logger.debug(f"Global npm root: {self._npm_root}")
            except (OSError, subprocess.SubprocessError) as e:
                logger.debug(f"Could not query global npm root: {e}")

            return self._npm_root


def _unique_paths(paths: Iterable[Path]) -> List[Path]:
    seen = set()
    unique = []
    for path in paths:
        if path not in seen:
            seen.add(path)
            unique.append(path)
    return unique
