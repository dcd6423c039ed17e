"""
Platform abstraction for window-manager specific calls
"""

from typing import Optional

from .base import Platform
from .x11 import X11Platform


def detect_platform() -> Optional[Platform]:
    """Auto-detect the current platform"""
    platforms = [
        X11Platform(),
    ]

    for platform in platforms:
        if platform.detect():
            return platform

    # No window-manager hints on unknown platforms
    return None


__all__ = [
    "Platform",
    "X11Platform",
    "detect_platform",
]
