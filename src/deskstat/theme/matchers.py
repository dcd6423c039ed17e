"""
Asset reference matchers.

Each matcher recognises one shape of asset reference in theme markup. Tags
are matched structurally with a regular expression, not parsed, and a match
never extends past the end of the tag it starts in. New shapes are added by
subclassing ``AssetMatcher`` and listing the class in ``DEFAULT_MATCHERS``.
"""

import re
from abc import ABC, abstractmethod
from typing import List, Optional, Pattern

from .models import AssetKind

# Template variables that prefix asset URLs in theme markup
MODULES_VAR = "<%=paths.modules%>"
THEME_VAR = "<%=paths.theme%>"

_MODULE_PATH = r"(?P<module>(?:@[^/\"]+/)?[^/\"]+)/(?P<file>[^\"]+)"


class AssetMatch:
    """A single reference found in the markup."""

    def __init__(
        self,
        kind: AssetKind,
        start: int,
        end: int,
        relative_file: str,
        module: Optional[str] = None,
    ):
        self.kind = kind
        self.start = start
        self.end = end
        self.relative_file = relative_file
        self.module = module

    def __repr__(self) -> str:
        return f"<AssetMatch({self.kind.value}, {self.module}, {self.relative_file}, {self.start}:{self.end})>"


class AssetMatcher(ABC):
    """
    Base class for asset reference matchers.

    Class Attributes:
        kind: Asset kind produced by this matcher
        pattern: Compiled pattern with a ``file`` group and, for package
                 assets, a ``module`` group
        placeholder_prefix: Text identifying the kind inside placeholders
    """

    kind: AssetKind = None
    pattern: Pattern = None
    placeholder_prefix: str = None

    def scan(self, markup: str) -> List[AssetMatch]:
        """Return every non-overlapping match in document order."""
        return [self._to_match(m) for m in self.pattern.finditer(markup)]

    def placeholder(self, match: AssetMatch) -> str:
        """Build the placeholder comment that replaces ``match``."""
        return f"<!-- {self.placeholder_prefix} FOR [{self.label(match)}] -->"

    @abstractmethod
    def label(self, match: AssetMatch) -> str:
        """Identify the referenced asset inside a placeholder."""
        pass

    def _to_match(self, m: "re.Match") -> AssetMatch:
        groups = m.groupdict()
        return AssetMatch(
            kind=self.kind,
            start=m.start(),
            end=m.end(),
            relative_file=groups["file"],
            module=groups.get("module"),
        )


class StylesheetMatcher(AssetMatcher):
    """``<link href="<%=paths.modules%>/module/file.css">`` references."""

    kind = AssetKind.CSS
    pattern = re.compile(
        r"<link\s[^>]*?href=\"" + re.escape(MODULES_VAR) + r"/" + _MODULE_PATH + r"\"[^>]*>"
    )
    placeholder_prefix = "CSS"

    def label(self, match: AssetMatch) -> str:
        return f"{match.module}/{match.relative_file}"


class ModuleScriptMatcher(AssetMatcher):
    """``<script src="<%=paths.modules%>/module/file.js"></script>`` references."""

    kind = AssetKind.BUNDLED_JS
    pattern = re.compile(
        r"<script\s[^>]*?src=\""
        + re.escape(MODULES_VAR)
        + r"/"
        + _MODULE_PATH
        + r"\"[^>]*>\s*</script>"
    )
    placeholder_prefix = "JS"

    def label(self, match: AssetMatch) -> str:
        return f"{match.module}/{match.relative_file}"


class ThemeScriptMatcher(AssetMatcher):
    """``<script src="<%=paths.theme%>/file.js"></script>`` references."""

    kind = AssetKind.LOCAL_JS
    pattern = re.compile(
        r"<script\s[^>]*?src=\"" + re.escape(THEME_VAR) + r"/(?P<file>[^\"]+)\"[^>]*>\s*</script>"
    )
    placeholder_prefix = "JS LOCAL"

    def label(self, match: AssetMatch) -> str:
        return match.relative_file


DEFAULT_MATCHERS = (StylesheetMatcher, ModuleScriptMatcher, ThemeScriptMatcher)
