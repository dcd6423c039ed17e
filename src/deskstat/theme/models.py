"""
Data model shared by the theme compile pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional


class AssetKind(Enum):
    """Kinds of asset reference recognised in theme markup."""

    CSS = "css"
    BUNDLED_JS = "js"
    LOCAL_JS = "jsLocal"


class CompileState(Enum):
    """Phases of a single compile pass."""

    IDLE = "idle"
    LOCATING_THEME = "locating_theme"
    READING_ENTRY = "reading_entry"
    DISCOVERING = "discovering"
    SCANNING_LOCAL = "scanning_local"
    RESOLVING_MODULES = "resolving_modules"
    SPLICING = "splicing"
    FINALIZING = "finalizing"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class ResolvedTheme:
    """
    Location of a theme for one compile pass.

    Attributes:
        entry_file: Main HTML file of the theme
        base_dir: Directory local asset references are resolved against
        package_name: Installed package the theme came from, if any
    """

    entry_file: Path
    base_dir: Path
    package_name: Optional[str] = None


@dataclass
class AssetMarker:
    """
    A discovered asset reference, replaced in the markup by ``placeholder``.

    ``content`` is filled in by the local script scanner (LOCAL_JS) or the
    splice engine (CSS and BUNDLED_JS).
    """

    kind: AssetKind
    relative_file: str
    placeholder: str
    module: Optional[str] = None
    content: Optional[str] = None

    @property
    def label(self) -> str:
        """Human readable reference used in placeholders and error messages."""
        if self.module:
            return f"{self.module}/{self.relative_file}"
        return self.relative_file


@dataclass
class DiscoveryResult:
    """Output of the discovery phase."""

    markup: str
    markers: List[AssetMarker] = field(default_factory=list)
    module_refs: List[str] = field(default_factory=list)

    def markers_of(self, kind: AssetKind) -> List[AssetMarker]:
        return [m for m in self.markers if m.kind is kind]


@dataclass(frozen=True)
class InstalledPackage:
    """A package found on disk by the package locator."""

    name: str
    install_dir: Path
    main: Optional[str] = None
    is_global: bool = False


@dataclass(frozen=True)
class ResolvedModule:
    """A module reference resolved to its install directory."""

    name: str
    install_dir: Path


ModuleMap = Dict[str, ResolvedModule]
