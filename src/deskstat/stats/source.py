"""
Push-based stats source polling registered collectors on a background thread.
"""

import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Type

from .base import BaseCollector
from .system import DEFAULT_COLLECTORS

logger = logging.getLogger(__name__)

StatsListener = Callable[[Dict[str, Any]], None]
ErrorListener = Callable[[Exception], None]


class CollectorRegistry:
    """Maps module names to collector classes."""

    def __init__(self):
        self._collectors: Dict[str, Type[BaseCollector]] = {}

    def register(self, collector_class: Type[BaseCollector]) -> None:
        """
        Register a collector class.

        Raises:
            TypeError: If collector_class doesn't inherit from BaseCollector
            ValueError: If collector_type is not defined
        """
        if not isinstance(collector_class, type) or not issubclass(collector_class, BaseCollector):
            raise TypeError(f"{collector_class} must inherit from BaseCollector")

        collector_type = collector_class.collector_type
        if not collector_type:
            raise ValueError(f"{collector_class.__name__} must define collector_type")

        if collector_type in self._collectors:
            logger.warning(f"Overwriting existing stats module: {collector_type}")

        self._collectors[collector_type] = collector_class
        logger.debug(f"Registered stats module: {collector_type}")

    def get(self, collector_type: str) -> Optional[Type[BaseCollector]]:
        return self._collectors.get(collector_type)

    def list_collectors(self) -> List[str]:
        return list(self._collectors.keys())


def default_registry() -> CollectorRegistry:
    registry = CollectorRegistry()
    for collector_class in DEFAULT_COLLECTORS:
        registry.register(collector_class)
    return registry


class StatsSource:
    """
    Polls registered collectors and pushes each payload to listeners.

    Modules are registered by name at runtime (usually on request of the
    theme). The poll interval can be changed while running; the new
    interval applies from the next wait.
    """

    def __init__(self, poll_interval_ms: int = 1000, registry: Optional[CollectorRegistry] = None):
        """
        Initialize the stats source.

        Args:
            poll_interval_ms: Time between polls in milliseconds
            registry: Available collector classes
        """
        self.registry = registry or default_registry()
        self.poll_interval_ms = poll_interval_ms
        self.running = False

        self._active: Dict[str, BaseCollector] = {}
        self._pending_settings: Dict[str, Dict[str, Any]] = {}
        self._listeners: List[StatsListener] = []
        self._error_listeners: List[ErrorListener] = []
        self._lock = threading.Lock()
        self._wake = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def registered(self) -> List[str]:
        with self._lock:
            return list(self._active.keys())

    def add_listener(self, listener: StatsListener) -> None:
        self._listeners.append(listener)

    def add_error_listener(self, listener: ErrorListener) -> None:
        self._error_listeners.append(listener)

    def register(self, modules: Iterable[str]) -> List[str]:
        """
        Activate stats modules by name.

        Returns:
            Names that were newly activated (unknown names are logged and skipped)
        """
        added = []
        with self._lock:
            for name in modules:
                if name in self._active:
                    continue
                collector_class = self.registry.get(name)
                if collector_class is None:
                    logger.warning(f"Unknown stats module requested: {name}")
                    continue
                self._active[name] = collector_class(self._pending_settings.get(name))
                added.append(name)

        if added:
            logger.debug(f"Register stats modules {', '.join(added)}")
        return added

    def settings(self, options: Dict[str, Dict[str, Any]]) -> None:
        """Apply per-module settings, keeping them for modules registered later."""
        with self._lock:
            for name, values in options.items():
                if not isinstance(values, dict):
                    logger.warning(f"Ignoring non-mapping settings for stats module {name}")
                    continue
                self._pending_settings.setdefault(name, {}).update(values)
                if name in self._active:
                    self._active[name].configure(values)

    def set_poll_interval(self, interval_ms: int) -> None:
        """Change the poll interval."""
        if interval_ms <= 0:
            raise ValueError("Poll interval must be positive")
        self.poll_interval_ms = interval_ms
        self._wake.set()

    def poll_once(self) -> Dict[str, Any]:
        """Collect from every active module and notify listeners."""
        with self._lock:
            collectors = list(self._active.values())

        payload = {c.collector_type: c.safe_collect() for c in collectors}

        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception as e:
                logger.error(f"Stats listener failed: {e}", exc_info=True)
                self._notify_error(e)
        return payload

    def start(self) -> None:
        """Start polling on a background thread."""
        if self._thread and self._thread.is_alive():
            logger.warning("Stats polling already running")
            return

        self.running = True
        self._wake.clear()
        self._thread = threading.Thread(target=self._poll_loop, daemon=True, name="StatsSource")
        self._thread.start()
        logger.debug(f"Stats polling started every {self.poll_interval_ms}ms")

    def stop(self) -> None:
        """Stop the polling thread."""
        self.running = False
        self._wake.set()

        if self._thread:
            self._thread.join(timeout=3)
            self._thread = None

        logger.debug("Stats polling stopped")

    def _poll_loop(self) -> None:
        while self.running:
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"Error in stats poll: {e}", exc_info=True)
                self._notify_error(e)

            self._wake.wait(self.poll_interval_ms / 1000.0)
            self._wake.clear()

    def _notify_error(self, error: Exception) -> None:
        for listener in list(self._error_listeners):
            try:
                listener(error)
            except Exception:
                logger.exception("Stats error listener failed")
