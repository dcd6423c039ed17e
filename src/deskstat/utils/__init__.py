"""
Utility modules for Deskstat.
"""

from .errors import (
    AssetReadError,
    CompileError,
    ConfigurationError,
    DeskstatError,
    ModuleResolutionError,
    PlatformError,
    ThemeNotFoundError,
    ThemeRenderError,
    WindowError,
    WriteError,
    error_boundary,
)

__all__ = [
    "DeskstatError",
    "ConfigurationError",
    "PlatformError",
    "WindowError",
    "CompileError",
    "ThemeNotFoundError",
    "AssetReadError",
    "ModuleResolutionError",
    "ThemeRenderError",
    "WriteError",
    "error_boundary",
]
