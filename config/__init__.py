"""
Configuration Module for SnapCrop.

Detection thresholds, display sizing, overlay styling, OCR parameters and
output locations are read from settings.yaml rather than hard-coded.

Lookup order for the settings file:
    1. Path passed to ConfigurationManager (e.g. ``--config``)
    2. SNAPCROP_CONFIG environment variable
    3. config/settings.yaml next to this module
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_ENV_VAR = "SNAPCROP_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "settings.yaml"


class ConfigurationManager:
    """
    Process-wide settings store.

    The first instantiation decides which file is loaded; later calls
    return the same instance. Call ``reset()`` to load a different file.

    Attributes:
        config_path (Path): Settings file that was loaded.

    Example:
        >>> settings = ConfigurationManager()
        >>> settings.get("detection.model")
        'hustvl/yolos-tiny'
        >>> settings.get("overlay.missing", "red")
        'red'
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        if self._initialized:
            return

        self.config_path = self._locate(config_path)
        self._load_config()
        self._initialized = True

    @staticmethod
    def _locate(config_path: Optional[str]) -> Path:
        if config_path:
            return Path(config_path)
        from_env = os.getenv(CONFIG_ENV_VAR)
        if from_env:
            return Path(from_env)
        return DEFAULT_CONFIG_PATH

    def _load_config(self) -> None:
        """
        Read and parse the settings file.

        Raises:
            FileNotFoundError: If the settings file is missing.
            yaml.YAMLError: If it is not valid YAML.
        """
        if not self.config_path.is_file():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f) or {}

        self._resolve_paths()

    def _resolve_paths(self) -> None:
        # Artefacts land relative to where the CLI is run, not the package
        base_dir = Path.cwd()
        for key, value in (self._config.get('paths') or {}).items():
            if value and not Path(value).is_absolute():
                self._config['paths'][key] = str(base_dir / value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a value by dotted key, e.g. ``"ocr.tesseract.psm"``.

        Returns ``default`` when any segment is missing or the path runs
        into a non-mapping value.
        """
        node: Any = self._config
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def get_all(self) -> Dict[str, Any]:
        """Shallow copy of the whole settings tree."""
        return self._config.copy()

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded settings; the next instantiation reloads."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """Shortcut for ``ConfigurationManager().get(key, default)``."""
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config', 'CONFIG_ENV_VAR']
