"""
X11 window-manager support through wmctrl
"""

import logging
import os
import shutil

from .base import Platform

logger = logging.getLogger(__name__)


class X11Platform(Platform):
    """X11 desktops with an EWMH compliant window manager"""

    name = "x11"
    display_server = "x11"

    def detect(self) -> bool:
        """Detect an X11 session with wmctrl available"""
        session_type = os.environ.get("XDG_SESSION_TYPE", "").lower()
        if session_type and session_type != "x11":
            return False

        if not os.environ.get("DISPLAY"):
            return False

        return shutil.which("wmctrl") is not None

    def apply_window_hints(self, title: str) -> bool:
        """Mark the window as below others and sticky across workspaces"""
        results = [
            self.execute_command(["wmctrl", "-F", "-r", title, "-b", "add,below"]),
            self.execute_command(["wmctrl", "-F", "-r", title, "-b", "add,sticky"]),
        ]
        if all(results):
            logger.debug(f"Applied window hints to '{title}'")
        return all(results)
