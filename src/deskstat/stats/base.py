"""
Base classes for stats collectors.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class BaseCollector(ABC):
    """
    Base class for a stats module.

    A theme registers the modules it wants by name; each poll calls
    ``safe_collect()`` on every registered collector and the results are
    pushed to the window as ``{collector_type: data}``.

    Class Attributes:
        collector_type: Unique module name (e.g., "cpu", "power")

    Example:
        >>> class UptimeCollector(BaseCollector):
        ...     collector_type = "uptime"
        ...
        ...     def collect(self):
        ...         return {"seconds": time.time() - psutil.boot_time()}
    """

    collector_type: str = None

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        """
        Initialize collector with settings.

        Args:
            settings: Module settings sent by the theme

        Raises:
            ValueError: If collector_type is not defined
        """
        if not self.collector_type:
            raise ValueError(f"{self.__class__.__name__} must define collector_type")

        self.settings: Dict[str, Any] = dict(settings or {})
        self._cached_data: Optional[Any] = None

    @abstractmethod
    def collect(self) -> Any:
        """
        Read fresh data.

        Called once per poll. Should be fast and non-blocking.
        """
        pass

    def configure(self, settings: Dict[str, Any]) -> None:
        """Merge new settings from the theme."""
        self.settings.update(settings)

    def safe_collect(self) -> Any:
        """
        Collect with standardized error handling.

        Returns:
            Fresh data on success, cached or fallback data on failure
        """
        try:
            data = self.collect()
            self._cached_data = data
            return data
        except Exception as e:
            logger.error(f"Error collecting {self.collector_type} stats: {e}", exc_info=True)
            if self._cached_data is not None:
                return self._cached_data
            return self.get_fallback_data()

    def get_fallback_data(self) -> Any:
        """Data used when collection fails and nothing is cached."""
        return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(type={self.collector_type})>"
