"""
Window hosts for the compiled theme document.
"""

from .base import WidgetWindow
from .browser import BrowserWindow

__all__ = ["WidgetWindow", "BrowserWindow"]
