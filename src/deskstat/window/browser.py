"""
Window host backed by an external browser running in app mode.
"""

import json
import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Sequence

from ..utils.errors import WindowError
from .base import WidgetWindow

logger = logging.getLogger(__name__)


class BrowserWindow(WidgetWindow):
    """
    Shows the document in a browser process started from ``command``.

    ``{url}`` in the command is replaced by the document's file URL. Reload
    restarts the process. Messages are published as JSON files next to the
    document, named ``<document stem>.<channel>.json``, for the page to poll;
    Chromium-based browsers need ``--allow-file-access-from-files`` for that.
    The window title comes from the document, which the compiler pins to the
    configured title so window-manager hints can find the window.
    """

    def __init__(self, command: Sequence[str], title: str = "Deskstat"):
        """
        Initialize the browser window.

        Args:
            command: Browser command line template
            title: Window title (used to find the window for WM hints)
        """
        self.command: List[str] = list(command)
        self.title = title
        self.document: Optional[Path] = None
        self._process: Optional[subprocess.Popen] = None

    def feed_path(self, channel: str) -> Path:
        """Path of the JSON file a channel's messages are written to."""
        if self.document is None:
            raise WindowError("No document loaded")
        return self.document.with_name(f"{self.document.stem}.{channel}.json")

    def load(self, document: Path) -> None:
        self.document = Path(document)
        logger.debug(f"Window document set to {self.document}")

    def show(self, inactive: bool = True) -> None:
        if self.is_open():
            return
        self._launch()

    def reload(self) -> None:
        if self.document is None:
            raise WindowError("Cannot reload before a document is loaded")

        logger.debug("Reloading window")
        self._terminate()
        self._launch()

    def send(self, channel: str, payload: Any) -> None:
        target = self.feed_path(channel)
        fd, tmp_name = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, default=str)
            os.replace(tmp_name, target)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise WindowError(f"Failed to publish {channel} message: {e}") from e

    def is_open(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def close(self) -> None:
        self._terminate()
        if self.document is not None:
            for feed in self.document.parent.glob(f"{self.document.stem}.*.json"):
                try:
                    feed.unlink()
                except OSError as e:
                    logger.debug(f"Could not remove {feed}: {e}")

    def build_command(self) -> List[str]:
        """Command line with the document URL substituted."""
        if self.document is None:
            raise WindowError("No document loaded")
        url = self.document.resolve().as_uri()
        return [part.replace("{url}", url).replace("{title}", self.title) for part in self.command]

    def _launch(self) -> None:
        command = self.build_command()
        logger.debug(f"Launching window: {' '.join(command)}")
        try:
            self._process = subprocess.Popen(
                command,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            self._process = None
            raise WindowError(f"Failed to launch browser '{command[0]}': {e}") from e

    def _terminate(self) -> None:
        if self._process is None:
            return

        process, self._process = self._process, None
        if process.poll() is not None:
            return

        process.terminate()
        try:
            process.wait(timeout=3)
        except subprocess.TimeoutExpired:
            logger.warning("Browser did not exit, killing it")
            process.kill()
            process.wait(timeout=3)
