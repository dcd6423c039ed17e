"""
Configuration loading for Deskstat.
"""

from .loader import ConfigLoader
from .settings import ShellConfig

__all__ = ["ConfigLoader", "ShellConfig"]
