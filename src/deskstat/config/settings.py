"""
Typed shell configuration.
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..theme.resolver import DEFAULT_MODULE_BLACKLIST
from ..utils.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_THEME = "deskstat-theme-default"

DEFAULT_BROWSER_COMMAND = [
    "chromium",
    "--app={url}",
    "--class=Deskstat",
    # The page polls its stats feed over file://
    "--allow-file-access-from-files",
    "--enable-transparent-visuals",
    "--disable-gpu",
]


@dataclass
class ShellConfig:
    """
    Every recognised option and its effect.

    Attributes:
        theme: Theme reference, a main HTML file path or an installed package name
        debug: Show a framed window and set ``debugMode`` in the theme
        verbose: Verbosity level; anything above 0 logs at DEBUG
        refresh: Stats poll interval in ms when on mains power
        refresh_battery: Stats poll interval in ms when on battery
        debug_stats: Log every stats payload sent to the window
        watch: Recompile and reload when the theme directory changes
        color: Coloured log output
        module_blacklist: Module names never resolved or rewritten
        global_module_dirs: Extra global package directories
        browser_command: Window host command, ``{url}`` is substituted
        stats_modules: Stats modules to poll (default: every available module)
        stats_settings: Per-module stats settings, keyed by module name
        window_title: Window title used for window-manager hints
        output: Fixed compiled document path instead of a temporary file
    """

    theme: str = DEFAULT_THEME
    debug: bool = False
    verbose: int = 0
    refresh: int = 1000
    refresh_battery: int = 10000
    debug_stats: bool = False
    watch: bool = False
    color: bool = True
    module_blacklist: List[str] = field(default_factory=lambda: list(DEFAULT_MODULE_BLACKLIST))
    global_module_dirs: List[Path] = field(default_factory=list)
    browser_command: List[str] = field(default_factory=lambda: list(DEFAULT_BROWSER_COMMAND))
    stats_modules: Optional[List[str]] = None
    stats_settings: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    window_title: str = "Deskstat"
    output: Optional[Path] = None

    @classmethod
    def option_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "ShellConfig":
        """
        Build a config from a mapping, ignoring keys set to None.

        Raises:
            ConfigurationError: If a value has the wrong type or range
        """
        known = set(cls.option_names())
        unknown = sorted(k for k in values if k not in known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

        config = cls(**{k: v for k, v in values.items() if k in known and v is not None})
        config.validate()
        return config

    def merged(self, overrides: Dict[str, Any]) -> "ShellConfig":
        """Return a copy with non-None ``overrides`` applied."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ShellConfig.from_dict(values)

    def validate(self) -> None:
        """Check and normalise option values."""
        if not isinstance(self.theme, str) or not self.theme.strip():
            raise ConfigurationError("'theme' must be a non-empty string")

        for name in ("refresh", "refresh_battery"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"'{name}' must be a positive number of milliseconds")

        if isinstance(self.verbose, bool) or not isinstance(self.verbose, int) or self.verbose < 0:
            raise ConfigurationError("'verbose' must be a non-negative integer")

        for name in ("debug", "debug_stats", "watch", "color"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"'{name}' must be true or false")

        if not isinstance(self.module_blacklist, list) or not all(
            isinstance(m, str) for m in self.module_blacklist
        ):
            raise ConfigurationError("'module_blacklist' must be a list of module names")

        if not isinstance(self.global_module_dirs, list):
            raise ConfigurationError("'global_module_dirs' must be a list of directories")
        self.global_module_dirs = [Path(d).expanduser() for d in self.global_module_dirs]

        if (
            not isinstance(self.browser_command, list)
            or not self.browser_command
            or not all(isinstance(part, str) for part in self.browser_command)
        ):
            raise ConfigurationError("'browser_command' must be a non-empty list of strings")

        if self.stats_modules is not None and (
            not isinstance(self.stats_modules, list)
            or not all(isinstance(m, str) for m in self.stats_modules)
        ):
            raise ConfigurationError("'stats_modules' must be a list of module names")

        if not isinstance(self.stats_settings, dict) or not all(
            isinstance(v, dict) for v in self.stats_settings.values()
        ):
            raise ConfigurationError("'stats_settings' must map module names to settings")

        if self.output is not None:
            self.output = Path(self.output).expanduser()
