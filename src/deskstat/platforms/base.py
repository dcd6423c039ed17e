"""
Base platform abstraction for window-manager specific behaviour
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional

logger = logging.getLogger(__name__)


class Platform(ABC):
    """Base platform class for desktop/window-manager specific implementations"""

    name: str = "base"
    display_server: Optional[str] = None

    @abstractmethod
    def detect(self) -> bool:
        """
        Detect if this platform is currently running

        Returns:
            True if this platform is detected
        """
        pass

    @abstractmethod
    def apply_window_hints(self, title: str) -> bool:
        """
        Keep the widget window below other windows and on every workspace

        Args:
            title: Exact title of the widget window

        Returns:
            True if every hint was applied
        """
        pass

    def execute_command(self, command: List[str]) -> bool:
        """
        Execute a command, logging its output at debug level

        Args:
            command: Command and arguments

        Returns:
            True if successful
        """
        logger.debug(f"[{self.name}] {' '.join(command)}")
        try:
            result = subprocess.run(command, capture_output=True, text=True, timeout=5)
        except (OSError, subprocess.SubprocessError) as e:
            logger.error(f"Command execution failed: {e}")
            return False

        for line in (result.stdout or "").splitlines():
            logger.debug(f"[{self.name}] > {line}")

        if result.returncode != 0:
            logger.warning(
                f"Command {command[0]} exited with {result.returncode}: {(result.stderr or '').strip()}"
            )
            return False
        return True
