"""
Deskstat session: the context object owning every collaborator of a run.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from .config.settings import ShellConfig
from .managers import StatsManager, ThemeWatcher
from .platforms import detect_platform
from .platforms.base import Platform
from .stats.source import StatsSource
from .theme.compiler import ThemeCompiler
from .utils.errors import error_boundary
from .window.base import WidgetWindow
from .window.browser import BrowserWindow

logger = logging.getLogger(__name__)


class DeskstatSession:
    """
    Owns the compiler, window, stats and watcher for one process.

    Created at process start and torn down with ``close()``. Holds what
    would otherwise be process-wide state: the window handle, the compiled
    document path and the battery flag (on the stats manager).
    """

    # How often the main loop checks that the window is still open
    WINDOW_CHECK_INTERVAL = 0.5

    def __init__(
        self,
        config: ShellConfig,
        window: Optional[WidgetWindow] = None,
        platform: Optional[Platform] = None,
        stats_source: Optional[StatsSource] = None,
    ) -> None:
        """
        Initialize the session.

        Args:
            config: Effective configuration
            window: Window host (a BrowserWindow by default)
            platform: Window-manager platform (auto-detected by default)
            stats_source: Stats source (polls psutil by default)
        """
        self.config = config
        self.running = False

        self.platform: Optional[Platform] = platform if platform is not None else detect_platform()
        logger.info(f"Detected platform: {self.platform.name if self.platform else 'generic'}")

        self.compiler = ThemeCompiler.from_config(config)

        self.window: WidgetWindow = window or BrowserWindow(
            config.browser_command, title=config.window_title
        )

        source = stats_source or StatsSource(poll_interval_ms=config.refresh)
        self.stats_manager = StatsManager(
            source,
            self.window,
            refresh_ms=config.refresh,
            refresh_battery_ms=config.refresh_battery,
            debug_stats=config.debug_stats,
        )
        self.watcher: Optional[ThemeWatcher] = None

    @property
    def document(self) -> Optional[Path]:
        """Current compiled document path."""
        return self.compiler.output_path

    @property
    def on_battery(self) -> bool:
        return self.stats_manager.on_battery

    def compile(self) -> Path:
        """Run one compile pass (raises CompileError on failure)."""
        return self.compiler.compile()

    def start(self) -> None:
        """
        Compile the theme and bring up the window, stats and watcher.

        Raises:
            CompileError: If the initial compile fails
            WindowError: If the window cannot be shown
        """
        document = self.compile()

        self.window.load(document)
        self.window.show(inactive=not self.config.debug)

        if self.platform and not self.config.debug:
            self._apply_window_hints()

        modules = self.config.stats_modules
        if modules is None:
            modules = self.stats_manager.source.registry.list_collectors()
        self.stats_manager.configure(self.config.stats_settings)
        self.stats_manager.register(modules)
        self.stats_manager.start()

        if self.config.watch:
            self.start_watching()

        self.running = True

    def start_watching(self) -> None:
        """Watch the resolved theme directory for changes."""
        theme = self.compiler.resolved_theme
        if theme is None:
            logger.warning("Cannot watch theme before it has been compiled")
            return

        self.watcher = ThemeWatcher(self.compiler, theme.base_dir, on_reloaded=self.theme_reloaded)
        self.watcher.start()

    @error_boundary()
    def theme_reloaded(self, document: Path) -> None:
        """Reload the window after a successful watch-triggered compile."""
        self.window.load(document)
        self.window.reload()

    def run(self) -> None:
        """
        Main application run loop.

        Starts everything, then waits until the window closes or
        ``running`` is cleared.
        """
        try:
            self.start()
            logger.info("Deskstat is running. Press Ctrl+C to exit.")

            while self.running and self.window.is_open():
                time.sleep(self.WINDOW_CHECK_INTERVAL)
            logger.debug("Window closed")
        finally:
            self.close()

    def close(self) -> None:
        """Tear everything down in reverse order of creation."""
        logger.info("Shutting down Deskstat...")
        self.running = False

        if self.watcher:
            self.watcher.stop()
            self.watcher = None

        self.stats_manager.stop()
        self.window.close()
        self.compiler.close()

    @error_boundary(default_return=False)
    def _apply_window_hints(self) -> bool:
        return self.platform.apply_window_hints(self.config.window_title)
