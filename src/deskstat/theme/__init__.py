"""
Theme compilation: locate a theme, inline its assets and write one document.
"""

from .compiler import ThemeCompiler
from .finalizer import DocumentFinalizer
from .locator import ThemeLocator
from .models import AssetKind, AssetMarker, CompileState, ResolvedModule, ResolvedTheme
from .packages import PackageLocator

__all__ = [
    "ThemeCompiler",
    "DocumentFinalizer",
    "ThemeLocator",
    "PackageLocator",
    "AssetKind",
    "AssetMarker",
    "CompileState",
    "ResolvedModule",
    "ResolvedTheme",
]
