"""
Configuration loader for pylongleaf.
Provides unified access to the YAML and JSON files in the packaged cfg/ directory.

Supports:
- YAML (.yaml, .yml) - simulation defaults
- JSON (.json) - model coefficient files

Features:
- Coefficient file caching
- Dotted-key lookup of simulation defaults
"""
import copy
import json
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from .exceptions import ConfigurationError, InvalidDataError

COEFFICIENT_FILE = 'll_model_coefficients.json'
DEFAULTS_FILE = 'simulation_defaults.yaml'


class ConfigLoader:
    """Loads and caches pylongleaf configuration from the cfg/ directory.

    Attributes:
        cfg_dir: Path to the configuration directory
        defaults: Loaded simulation defaults
    """

    def __init__(self, cfg_dir: Optional[Path] = None):
        """Initialize the configuration loader.

        Args:
            cfg_dir: Path to the configuration directory. Defaults to the
                cfg/ directory shipped inside the package.
        """
        if cfg_dir is None:
            cfg_dir = Path(__file__).parent / 'cfg'
        self.cfg_dir = Path(cfg_dir)

        # Cache for coefficient files (loaded once, reused)
        self._coefficient_cache: Dict[str, Dict[str, Any]] = {}

        defaults_file = self.cfg_dir / DEFAULTS_FILE
        self.defaults = self._load_config_file(defaults_file) if defaults_file.exists() else {}

    def _load_config_file(self, file_path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML or JSON file.

        Args:
            file_path: Path to the configuration file

        Returns:
            Dictionary containing configuration data

        Raises:
            FileNotFoundError: If file doesn't exist
            ConfigurationError: If file format is not supported
            InvalidDataError: If the file cannot be parsed or is empty
        """
        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        suffix = file_path.suffix.lower()

        try:
            if suffix in ['.yaml', '.yml']:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f)
            elif suffix == '.json':
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            else:
                raise ConfigurationError(f"Unsupported configuration file format: {suffix}. "
                                         f"Supported formats: .yaml, .yml, .json")
        except yaml.YAMLError as e:
            raise InvalidDataError("YAML configuration", f"parsing error: {str(e)}") from e
        except json.JSONDecodeError as e:
            raise InvalidDataError("JSON configuration", f"parsing error: {str(e)}") from e

        if data is None:
            raise InvalidDataError(f"configuration file {file_path.name}",
                                   "file is empty or contains only comments")
        return data

    def load_coefficient_file(self, filename: str = COEFFICIENT_FILE) -> Dict[str, Any]:
        """Load a JSON coefficient file with caching.

        Args:
            filename: Name of the coefficient file inside cfg_dir

        Returns:
            Dictionary containing coefficient data

        Raises:
            FileNotFoundError: If the file doesn't exist
            InvalidDataError: If the file cannot be parsed
        """
        if filename not in self._coefficient_cache:
            self._coefficient_cache[filename] = self._load_config_file(self.cfg_dir / filename)
        return self._coefficient_cache[filename]

    def get_default(self, key: str, default: Any = None) -> Any:
        """Look up a simulation default by dotted key, e.g. 'merchantability.top_diameter'.

        Args:
            key: Dotted path into the defaults file
            default: Value returned when the key is absent

        Returns:
            The configured value or ``default``
        """
        node: Any = self.defaults
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def clear_coefficient_cache(self) -> None:
        """Clear the coefficient file cache.

        Useful for testing or when configuration files may have changed.
        """
        self._coefficient_cache.clear()


# Global configuration loader instance
_config_loader: Optional[ConfigLoader] = None


def get_config_loader() -> ConfigLoader:
    """Get the process-wide configuration loader.

    Returns:
        ConfigLoader instance reading the packaged cfg/ directory
    """
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def load_coefficient_file(filename: str = COEFFICIENT_FILE) -> Dict[str, Any]:
    """Convenience function to load a JSON coefficient file with caching.

    Args:
        filename: Name of the coefficient file

    Returns:
        Dictionary containing coefficient data
    """
    return get_config_loader().load_coefficient_file(filename)


def get_simulation_default(key: str, default: Any = None) -> Any:
    """Convenience function to read one simulation default by dotted key."""
    return get_config_loader().get_default(key, default)


def load_simulation_defaults() -> Dict[str, Any]:
    """Return a copy of the full simulation defaults mapping."""
    return copy.deepcopy(get_config_loader().defaults)
