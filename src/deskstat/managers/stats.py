"""
Stats fan-out to the window, with battery-aware polling.
"""

import json
import logging
from typing import Any, Dict, Iterable, Optional

from ..stats.source import StatsSource
from ..utils.errors import error_boundary
from ..window.base import WidgetWindow

logger = logging.getLogger(__name__)

STATS_CHANNEL = "updateStats"


class StatsManager:
    """
    Forwards stats payloads to the window.

    Responsibilities:
    - Registering stats modules and their settings
    - Switching the poll interval when running on battery
    - Optionally logging every payload (debug stats)
    """

    def __init__(
        self,
        source: StatsSource,
        window: Optional[WidgetWindow],
        refresh_ms: int = 1000,
        refresh_battery_ms: int = 10000,
        debug_stats: bool = False,
    ):
        """
        Initialize the stats manager.

        Args:
            source: Stats source to subscribe to
            window: Window receiving payloads (may be attached later)
            refresh_ms: Poll interval on mains power
            refresh_battery_ms: Poll interval on battery
            debug_stats: Log each payload
        """
        self.source = source
        self.window = window
        self.refresh_ms = refresh_ms
        self.refresh_battery_ms = refresh_battery_ms
        self.debug_stats = debug_stats
        self.on_battery = False

        self.source.set_poll_interval(refresh_ms)
        self.source.add_listener(self.handle_update)
        self.source.add_error_listener(self._handle_error)

    def register(self, modules: Iterable[str]) -> None:
        """Activate stats modules requested by the theme."""
        self.source.register(modules)

    def configure(self, options: Dict[str, Dict[str, Any]]) -> None:
        """Apply module settings requested by the theme."""
        logger.debug(f"Register stats settings {options}")
        self.source.settings(options)

    def start(self) -> None:
        self.source.start()

    def stop(self) -> None:
        self.source.stop()

    @error_boundary()
    def handle_update(self, stats: Dict[str, Any]) -> None:
        """Handle one stats payload."""
        if self.debug_stats:
            logger.info(f"[Stats] {json.dumps(stats, indent=2, default=str)}")

        self._update_power_mode(stats)

        if self.window is not None and self.window.is_open():
            self.window.send(STATS_CHANNEL, stats)

    def _update_power_mode(self, stats: Dict[str, Any]) -> None:
        power = stats.get("power") or []
        status = power[0].get("status") if power and isinstance(power[0], dict) else None

        if not self.on_battery and status == "discharging":
            logger.info(f"Detected battery mode - adjusting stats poll to {self.refresh_battery_ms}ms")
            self.source.set_poll_interval(self.refresh_battery_ms)
            self.on_battery = True
        elif self.on_battery and status != "discharging":
            logger.info(f"Detected powered mode - adjusting stats poll to {self.refresh_ms}ms")
            self.source.set_poll_interval(self.refresh_ms)
            self.on_battery = False

    def _handle_error(self, error: Exception) -> None:
        logger.error(f"[Stats] {error}")
