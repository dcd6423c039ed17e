"""
Window host abstraction
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class WidgetWindow(ABC):
    """
    A window displaying the compiled theme document.

    Implementations own whatever process or toolkit renders the HTML. The
    session loads the document once, reloads it after each successful
    watch-triggered compile and pushes stats through ``send``.
    """

    title: str = "Deskstat"

    @abstractmethod
    def load(self, document: Path) -> None:
        """
        Point the window at a compiled document

        Args:
            document: Path to the compiled HTML file
        """
        pass

    @abstractmethod
    def show(self, inactive: bool = True) -> None:
        """
        Make the window visible

        Args:
            inactive: Show without taking focus
        """
        pass

    @abstractmethod
    def reload(self) -> None:
        """Re-read the current document"""
        pass

    @abstractmethod
    def send(self, channel: str, payload: Any) -> None:
        """
        Deliver a message to the page

        Args:
            channel: Message name (e.g., "updateStats")
            payload: JSON-serialisable data
        """
        pass

    @abstractmethod
    def is_open(self) -> bool:
        """
        Check whether the window is still open

        Returns:
            True while the window exists
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the window and release its resources"""
        pass
