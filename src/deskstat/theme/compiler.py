"""
Theme compile pipeline.

Turns a theme reference into a single self-contained HTML document:

1. Locate the theme (file path or installed package)
2. Read the main HTML file
3. Discover linked CSS / JS assets
4. Pre-load local scripts and collect the modules they require
5. Resolve every referenced module to its install directory
6. Inline asset contents into the HTML stream
7. Render template variables and write the document
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from ..utils.errors import AssetReadError, CompileError
from .discovery import AssetDiscoverer, LocalScriptScanner
from .finalizer import PACKAGE_ROOT, DocumentFinalizer
from .locator import ThemeLocator
from .models import CompileState, ResolvedTheme
from .packages import PackageLocator
from .resolver import DEFAULT_MODULE_BLACKLIST, ModuleResolver
from .splice import SpliceEngine

if TYPE_CHECKING:
    from ..config.settings import ShellConfig

logger = logging.getLogger(__name__)

CompleteCallback = Callable[[Optional[Path], Optional[CompileError]], None]
StateListener = Callable[[CompileState], None]


class ThemeCompiler:
    """
    Orchestrates compile passes for one theme reference.

    Compile passes are serialised: at most one runs at a time, and recompile
    requests arriving while a pass is running collapse into one follow-up
    pass. Nothing but the output path is carried between passes.
    """

    def __init__(
        self,
        theme: str,
        package_locator: Optional[PackageLocator] = None,
        finalizer: Optional[DocumentFinalizer] = None,
        search_roots: Optional[Sequence[Path]] = None,
        module_blacklist: Sequence[str] = DEFAULT_MODULE_BLACKLIST,
        max_workers: int = 4,
        on_state_change: Optional[StateListener] = None,
    ):
        """
        Initialize the compiler.

        Args:
            theme: Theme reference (file path or package name)
            package_locator: Locator for theme and asset packages
            finalizer: Writer for the compiled document
            search_roots: Directories to search for a theme package
            module_blacklist: Module names never resolved or rewritten
            max_workers: Threads used for concurrent steps within a phase
            on_state_change: Called with every state transition
        """
        self.theme = theme
        self.package_locator = package_locator or PackageLocator()
        self.finalizer = finalizer or DocumentFinalizer()
        self.on_state_change = on_state_change

        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ThemeCompiler")
        self.locator = ThemeLocator(
            self.package_locator,
            search_roots if search_roots is not None else [Path.cwd()],
            executor=self._executor,
        )
        self.discoverer = AssetDiscoverer(executor=self._executor)
        self.scanner = LocalScriptScanner(executor=self._executor)
        self.resolver = ModuleResolver(self.package_locator, blacklist=module_blacklist)
        self.splicer = SpliceEngine(blacklist=module_blacklist, executor=self._executor)

        self.state: CompileState = CompileState.IDLE
        self.resolved_theme: Optional[ResolvedTheme] = None
        self.last_error: Optional[CompileError] = None

        self._compile_lock = threading.Lock()
        self._flight_lock = threading.Lock()
        self._in_flight = False
        self._pending = False

    @classmethod
    def from_config(
        cls, config: "ShellConfig", search_roots: Optional[Sequence[Path]] = None, **kwargs
    ) -> "ThemeCompiler":
        """
        Build a compiler wired from the shell configuration.

        Themes are searched from the working directory, then the application
        directory, unless ``search_roots`` is given.
        """
        return cls(
            theme=config.theme,
            package_locator=PackageLocator(global_dirs=config.global_module_dirs),
            finalizer=DocumentFinalizer(
                debug=config.debug, output_path=config.output, title=config.window_title
            ),
            search_roots=search_roots if search_roots is not None else [Path.cwd(), PACKAGE_ROOT],
            module_blacklist=config.module_blacklist,
            **kwargs,
        )

    @property
    def output_path(self) -> Optional[Path]:
        """Path of the compiled document (None before the first successful pass)."""
        return self.finalizer.output_path

    def compile(self) -> Path:
        """
        Run one full compile pass.

        Returns:
            Path to the compiled document

        Raises:
            CompileError: If any phase fails; no document is written
        """
        with self._compile_lock:
            try:
                path = self._run_pass()
            except CompileError as e:
                self.last_error = e
                self._transition(CompileState.FAILED)
                raise

            self.last_error = None
            self._transition(CompileState.READY)
            return path

    def request_recompile(self, on_complete: Optional[CompleteCallback] = None) -> bool:
        """
        Recompile, coalescing requests that arrive during a running pass.

        ``on_complete`` receives ``(path, None)`` on success or
        ``(None, error)`` on failure after every pass this call runs.

        Returns:
            True if this call ran the pass(es), False if the request was
            folded into a pass already in progress
        """
        with self._flight_lock:
            if self._in_flight:
                self._pending = True
                logger.debug("Compile already running, queued one follow-up pass")
                return False
            self._in_flight = True

        try:
            while True:
                with self._flight_lock:
                    self._pending = False

                try:
                    path = self.compile()
                except CompileError as e:
                    if on_complete:
                        on_complete(None, e)
                else:
                    if on_complete:
                        on_complete(path, None)

                with self._flight_lock:
                    if not self._pending:
                        self._in_flight = False
                        return True
        except BaseException:
            with self._flight_lock:
                self._in_flight = False
            raise

    def close(self, keep_document: bool = False) -> None:
        """Shut down worker threads and remove the temporary document."""
        self._executor.shutdown(wait=True)
        if not keep_document:
            self.finalizer.cleanup()

    def _run_pass(self) -> Path:
        self._transition(CompileState.LOCATING_THEME)
        theme = self.locator.locate(self.theme)
        self.resolved_theme = theme

        self._transition(CompileState.READING_ENTRY)
        try:
            markup = theme.entry_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise AssetReadError(theme.entry_file, str(e)) from e

        self._transition(CompileState.DISCOVERING)
        discovery = self.discoverer.discover(markup)

        self._transition(CompileState.SCANNING_LOCAL)
        discovery.module_refs.extend(self.scanner.scan(discovery.markers, theme.base_dir))

        self._transition(CompileState.RESOLVING_MODULES)
        modules = self.resolver.resolve(discovery.module_refs, search_root=theme.base_dir)

        self._transition(CompileState.SPLICING)
        spliced = self.splicer.splice(discovery.markup, discovery.markers, modules)

        self._transition(CompileState.FINALIZING)
        path = self.finalizer.finalize(spliced, theme.base_dir)
        logger.info(f"Compiled theme {theme.entry_file} -> {path}")
        return path

    def _transition(self, state: CompileState) -> None:
        self.state = state
        logger.debug(f"Compile state: {state.value}")
        if self.on_state_change:
            self.on_state_change(state)
