"""
Configuration handling for the timestamp splitter
"""
import copy
import os
import yaml
from typing import Dict, Any, Optional


class Config:
    """Application configuration: defaults, YAML file, then CLI arguments"""

    DEFAULT_CONFIG = {
        'output_dir': './output',
        'archive': False,
        'archive_name': None,
        'embed_tags': True,
        'max_file_size_mb': 500,
        'max_title_length': 200,
        'encoder': {
            'bitrate': '128k',
        },
    }

    # Sections merged key by key instead of replaced
    NESTED_KEYS = ('encoder',)
    INT_KEYS = ('max_file_size_mb', 'max_title_length')

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize the configuration

        Args:
            config_file: Path to a YAML configuration file (optional)
        """
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)

        if config_file and os.path.exists(config_file):
            self.load_from_file(config_file)

    def load_from_file(self, config_file: str) -> None:
        """
        Load configuration from a YAML file

        Args:
            config_file: Path to the configuration file
        """
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ValueError(f"Error loading configuration file: {e}")

        if not file_config:
            return
        if not isinstance(file_config, dict):
            raise ValueError("Error loading configuration file: top level must be a mapping")
        for key, value in file_config.items():
            if key in self.NESTED_KEYS and not isinstance(value, dict):
                raise ValueError(f"Error loading configuration file: '{key}' must be a mapping")
            if key in self.INT_KEYS and (isinstance(value, bool) or not isinstance(value, int)):
                raise ValueError(f"Error loading configuration file: '{key}' must be an integer")
            if key in self.NESTED_KEYS:
                self._deep_merge(self.config[key], value)
            else:
                self.config[key] = value

    def _deep_merge(self, base: dict, update: dict) -> None:
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def update_from_args(self, args: Dict[str, Any]) -> None:
        """
        Apply CLI arguments; they take precedence over the file.
        ``None`` values leave the current setting untouched.
        """
        for key, value in args.items():
            if value is not None:
                self.config[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def get_all(self) -> Dict[str, Any]:
        return self.config.copy()


def find_default_config(cwd: Optional[str] = None) -> Optional[str]:
    """Return ``config.yml`` or ``config.yaml`` from ``cwd`` if present."""
    cwd = cwd or os.getcwd()
    for name in ('config.yml', 'config.yaml'):
        candidate = os.path.join(cwd, name)
        if os.path.exists(candidate):
            return candidate
    return None
