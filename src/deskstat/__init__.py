"""
Deskstat - A themeable HTML desktop widget showing live system statistics
"""

__version__ = "0.1.0"

from .session import DeskstatSession
from .theme import ThemeCompiler

__all__ = ["DeskstatSession", "ThemeCompiler"]
