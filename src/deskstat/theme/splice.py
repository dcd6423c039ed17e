"""
Splice phase: inline asset contents in place of their placeholders.
"""

import logging
import re
from concurrent.futures import Executor
from typing import Dict, FrozenSet, List, Optional, Sequence

from ..utils.errors import AssetReadError, ModuleResolutionError
from .discovery import REQUIRE_PATTERN, is_package_name
from .models import AssetKind, AssetMarker, ModuleMap
from .resolver import DEFAULT_MODULE_BLACKLIST
from .tasks import run_concurrently

logger = logging.getLogger(__name__)

_WRAPPERS = {
    AssetKind.CSS: ("<style>", "</style>"),
    AssetKind.BUNDLED_JS: ("<script>", "</script>"),
    AssetKind.LOCAL_JS: ("<script>", "</script>"),
}

_KIND_NAMES = {
    AssetKind.CSS: "CSS",
    AssetKind.BUNDLED_JS: "JS",
    AssetKind.LOCAL_JS: "JS local",
}


class SpliceEngine:
    """
    Replaces placeholders with wrapped asset content.

    The CSS, bundled JS and local JS passes run concurrently. Each pass only
    produces replacements for its own placeholders; they are applied to the
    markup together once every pass has finished.
    """

    def __init__(
        self,
        blacklist: Sequence[str] = DEFAULT_MODULE_BLACKLIST,
        executor: Optional[Executor] = None,
    ):
        self.blacklist: FrozenSet[str] = frozenset(blacklist)
        self.executor = executor

    def splice(self, markup: str, markers: Sequence[AssetMarker], modules: ModuleMap) -> str:
        """
        Inline every marker into ``markup``.

        Raises:
            ModuleResolutionError: If a needed module was not resolved
            AssetReadError: If a package asset cannot be read
        """
        by_kind = {kind: [m for m in markers if m.kind is kind] for kind in AssetKind}

        passes = run_concurrently(
            self.executor,
            lambda: self._package_pass(by_kind[AssetKind.CSS], modules),
            lambda: self._package_pass(by_kind[AssetKind.BUNDLED_JS], modules),
            lambda: self._local_pass(by_kind[AssetKind.LOCAL_JS], modules),
        )

        replacements: Dict[str, str] = {}
        for produced in passes:
            replacements.update(produced)

        return apply_replacements(markup, replacements)

    def rewrite_requires(self, marker: AssetMarker, modules: ModuleMap) -> str:
        """
        Point ``require`` calls in a local script at resolved install directories.

        Blacklisted and relative requires are left untouched. The original
        quote character is kept.
        """

        def replace(match: "re.Match") -> str:
            quote, name = match.group(1), match.group(2)
            if name in self.blacklist or not is_package_name(name):
                return match.group(0)

            module = modules.get(name)
            if module is None:
                raise ModuleResolutionError(
                    name, requested_by=marker.relative_file, kind=_KIND_NAMES[marker.kind]
                )
            return f"require({quote}{module.install_dir}{quote})"

        return REQUIRE_PATTERN.sub(replace, marker.content or "")

    def _package_pass(self, markers: List[AssetMarker], modules: ModuleMap) -> Dict[str, str]:
        replacements = {}
        for marker in markers:
            module = modules.get(marker.module)
            if module is None:
                raise ModuleResolutionError(
                    marker.module, requested_by=marker.relative_file, kind=_KIND_NAMES[marker.kind]
                )

            path = module.install_dir / marker.relative_file
            logger.debug(f"Read {_KIND_NAMES[marker.kind]} asset {path}")
            try:
                marker.content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise AssetReadError(path, str(e)) from e

            replacements[marker.placeholder] = _spliced(marker, marker.content)
        return replacements

    def _local_pass(self, markers: List[AssetMarker], modules: ModuleMap) -> Dict[str, str]:
        replacements = {}
        for marker in markers:
            logger.debug(f"Rewrite JS local asset {marker.relative_file}")
            replacements[marker.placeholder] = _spliced(
                marker, self.rewrite_requires(marker, modules)
            )
        return replacements


def _spliced(marker: AssetMarker, content: str) -> str:
    opening, closing = _WRAPPERS[marker.kind]
    return f"{marker.placeholder}\n{opening}{content}{closing}"


def apply_replacements(markup: str, replacements: Dict[str, str]) -> str:
    """Replace the first occurrence of each placeholder in a single pass."""
    if not replacements:
        return markup

    pattern = re.compile("|".join(re.escape(p) for p in sorted(replacements, key=len, reverse=True)))
    pending = dict(replacements)

    def replace(match: "re.Match") -> str:
        text = match.group(0)
        if text in pending:
            return pending.pop(text)
        return text

    return pattern.sub(replace, markup)
