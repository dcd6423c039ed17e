"""
Managers for the long-running parts of a Deskstat session.

- StatsManager: Stats fan-out to the window and battery-aware polling
- ThemeWatcher: Recompile and reload on theme changes
"""

from .stats import StatsManager
from .watcher import ThemeWatcher

__all__ = [
    "StatsManager",
    "ThemeWatcher",
]
