"""
Discovery phase: find asset references in theme markup and pre-load local scripts.
"""

import logging
import re
from concurrent.futures import Executor
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..utils.errors import AssetReadError
from .matchers import DEFAULT_MATCHERS, AssetMatch, AssetMatcher
from .models import AssetKind, AssetMarker, DiscoveryResult
from .tasks import run_concurrently

logger = logging.getLogger(__name__)

# require("name") / require('name'), group 1 is the quote, group 2 the name
REQUIRE_PATTERN = re.compile(r"require\(([\"'])(.+?)\1\)")


def is_package_name(name: str) -> bool:
    """Return False for relative or absolute file requires."""
    return not (name.startswith(".") or name.startswith("/"))


class AssetDiscoverer:
    """
    Replaces asset references in markup with placeholder comments.

    All matchers scan the same input; their matches are merged in document
    order and applied in a single rewrite, so matchers never see each
    other's placeholders.
    """

    def __init__(
        self,
        matchers: Optional[Sequence[AssetMatcher]] = None,
        executor: Optional[Executor] = None,
    ):
        self.matchers: List[AssetMatcher] = (
            list(matchers) if matchers is not None else [cls() for cls in DEFAULT_MATCHERS]
        )
        self.executor = executor

    def discover(self, markup: str) -> DiscoveryResult:
        """
        Scan ``markup`` for asset references.

        Returns:
            Markup with placeholders, markers in document order, and the
            module names referenced by CSS and bundled JS tags
        """
        scans = run_concurrently(
            self.executor, *[lambda m=matcher: (m, m.scan(markup)) for matcher in self.matchers]
        )

        matches = []
        for matcher, found in scans:
            matches.extend((match, matcher) for match in found)
        matches.sort(key=lambda item: item[0].start)

        result = DiscoveryResult(markup=markup)
        pieces = []
        cursor = 0
        seen_placeholders: Dict[str, int] = {}

        for match, matcher in matches:
            if match.start < cursor:
                logger.warning(
                    f"Ignoring {match.kind.value} reference overlapping an earlier asset tag: {match!r}"
                )
                continue

            placeholder = self._unique(matcher.placeholder(match), seen_placeholders)
            marker = AssetMarker(
                kind=match.kind,
                relative_file=match.relative_file,
                placeholder=placeholder,
                module=match.module,
            )
            result.markers.append(marker)
            if match.kind is not AssetKind.LOCAL_JS and match.module:
                result.module_refs.append(match.module)

            pieces.append(markup[cursor : match.start])
            pieces.append(placeholder)
            cursor = match.end

        pieces.append(markup[cursor:])
        result.markup = "".join(pieces)

        logger.debug(
            f"Discovered {len(result.markers)} assets "
            f"({len(result.markers_of(AssetKind.CSS))} CSS, "
            f"{len(result.markers_of(AssetKind.BUNDLED_JS))} JS, "
            f"{len(result.markers_of(AssetKind.LOCAL_JS))} local JS)"
        )
        return result

    @staticmethod
    def _unique(placeholder: str, seen: Dict[str, int]) -> str:
        count = seen.get(placeholder, 0) + 1
        seen[placeholder] = count
        if count == 1:
            return placeholder
        return placeholder[: -len(" -->")] + f" #{count} -->"


class LocalScriptScanner:
    """Reads local theme scripts and collects the packages they ``require``."""

    def __init__(self, executor: Optional[Executor] = None):
        self.executor = executor

    def scan(self, markers: Sequence[AssetMarker], base_dir: Path) -> List[str]:
        """
        Load every LOCAL_JS marker's content and return the required package names.

        Raises:
            AssetReadError: If a local script cannot be read
        """
        local = [m for m in markers if m.kind is AssetKind.LOCAL_JS]
        found = run_concurrently(
            self.executor, *[lambda m=marker: self._load(m, base_dir) for marker in local]
        )

        module_refs = []
        for names in found:
            module_refs.extend(names)
        return module_refs

    def _load(self, marker: AssetMarker, base_dir: Path) -> List[str]:
        path = Path(base_dir) / marker.relative_file
        try:
            marker.content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise AssetReadError(path, f"required as JS local pre-load ({e})") from e

        names = [
            m.group(2)
            for m in REQUIRE_PATTERN.finditer(marker.content)
            if is_package_name(m.group(2))
        ]
        if names:
            logger.debug(f"Local script {marker.relative_file} requires: {', '.join(names)}")
        return names
