"""
Configuration loader for Deskstat
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..utils.errors import ConfigurationError
from .settings import ShellConfig

logger = logging.getLogger(__name__)

# Maximum config file size (1MB should be plenty for YAML configs)
MAX_CONFIG_SIZE = 1024 * 1024

DEFAULT_CONFIG_PATH = Path.home() / ".deskstat" / "config.yaml"


class ConfigLoader:
    """Loads YAML configuration files into a ShellConfig"""

    def load_file(self, config_path: str) -> Dict[str, Any]:
        """
        Load raw configuration values from a YAML file.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Mapping of option names to values (empty for an empty file)

        Raises:
            ConfigurationError: If the file is missing, too large, unreadable or invalid
        """
        resolved_path = Path(config_path).expanduser().resolve()

        if resolved_path.is_dir():
            raise ConfigurationError(f"Path is a directory, not a file: {resolved_path}")

        if not resolved_path.exists():
            raise ConfigurationError(f"Configuration file not found: {resolved_path}")

        if resolved_path.suffix.lower() not in [".yaml", ".yml"]:
            logger.warning(
                f"Configuration file has unexpected extension: {resolved_path.suffix}. "
                f"Expected .yaml or .yml"
            )

        file_size = resolved_path.stat().st_size
        if file_size > MAX_CONFIG_SIZE:
            raise ConfigurationError(
                f"Configuration file too large: {file_size} bytes "
                f"(maximum {MAX_CONFIG_SIZE} bytes)"
            )

        try:
            with open(resolved_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {e}")

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigurationError("Configuration must be a dictionary")

        # YAML keys may use dashes like the command line flags
        config = {str(key).replace("-", "_"): value for key, value in config.items()}

        logger.info(f"Loaded configuration from {resolved_path}")
        return config

    def load(
        self,
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> ShellConfig:
        """
        Build the effective configuration.

        Defaults are overlaid with the config file (``config_path``, or the
        default location when it exists) and then with ``overrides``.

        Raises:
            ConfigurationError: If the file or any value is invalid
        """
        values: Dict[str, Any] = {}

        if config_path:
            values.update(self.load_file(config_path))
        elif DEFAULT_CONFIG_PATH.is_file():
            values.update(self.load_file(str(DEFAULT_CONFIG_PATH)))

        values.update({k: v for k, v in (overrides or {}).items() if v is not None})
        return ShellConfig.from_dict(values)
