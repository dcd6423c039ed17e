"""
Theme directory watching.

Recompiles the theme whenever a file under its directory changes and hands
the result to a callback (the session reloads the window on success).
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..theme.compiler import ThemeCompiler
from ..utils.errors import CompileError, error_boundary

logger = logging.getLogger(__name__)

ReloadCallback = Callable[[Path], None]

# Event types that mean content changed (opened/closed events are ignored)
CHANGE_EVENTS = frozenset({"created", "modified", "deleted", "moved"})


class ThemeChangeHandler(FileSystemEventHandler):
    """Turns file-system events into recompile requests."""

    def __init__(self, watcher: "ThemeWatcher"):
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in CHANGE_EVENTS:
            return
        if event.is_directory and event.event_type == "modified":
            return
        self.watcher.handle_change(event.event_type, event.src_path)


class ThemeWatcher:
    """
    Watches a theme directory recursively and recompiles on change.

    Recompiles go through ``ThemeCompiler.request_recompile`` so a burst of
    events never runs overlapping compile passes.
    """

    def __init__(
        self,
        compiler: ThemeCompiler,
        directory: Path,
        on_reloaded: Optional[ReloadCallback] = None,
        observer_factory: Callable[[], Observer] = Observer,
    ):
        """
        Initialize the watcher.

        Args:
            compiler: Compiler to rerun on change
            directory: Theme directory to watch
            on_reloaded: Called with the document path after a successful recompile
            observer_factory: Creates the watchdog observer
        """
        self.compiler = compiler
        self.directory = Path(directory)
        self.on_reloaded = on_reloaded
        self.observer_factory = observer_factory
        self._observer: Optional[Observer] = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        """Start watching the directory."""
        if self._observer is not None:
            logger.warning("Theme watcher already running")
            return

        logger.info(f"Watching {self.directory}")
        observer = self.observer_factory()
        observer.schedule(ThemeChangeHandler(self), str(self.directory), recursive=True)
        observer.daemon = True
        observer.start()
        self._observer = observer

    def stop(self) -> None:
        """Stop watching."""
        if self._observer is None:
            return

        observer, self._observer = self._observer, None
        observer.stop()
        observer.join(timeout=3)
        logger.debug("Theme watcher stopped")

    @error_boundary()
    def handle_change(self, event_type: str, path: str) -> None:
        """React to one file-system event."""
        logger.info(f"Detected {event_type} on {path}")
        self.compiler.request_recompile(self._on_compiled)

    def _on_compiled(self, path: Optional[Path], error: Optional[CompileError]) -> None:
        if error is not None:
            logger.error(f"Error while re-loading theme - {error}")
            return

        logger.info("Theme reloaded")
        if self.on_reloaded:
            self.on_reloaded(path)
