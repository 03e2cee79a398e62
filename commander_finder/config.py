"""Configuration management for Commander Finder."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional
from dataclasses import dataclass, asdict


logger = logging.getLogger(__name__)


def _coerce(value: Any, default: Any) -> Any:
    """
    Convert a loaded config value to the type of the field's default.

    Raises:
        ValueError/TypeError: If the value cannot be used for that field
    """
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ('true', 'false'):
            return value.lower() == 'true'
        raise TypeError(f"expected a boolean, got {value!r}")

    if isinstance(default, (int, float)):
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise TypeError(f"expected a number, got {value!r}")
        return type(default)(value)

    if isinstance(default, str):
        if not isinstance(value, str):
            raise TypeError(f"expected a string, got {value!r}")
        return value

    return value


@dataclass
class FinderConfig:
    """Configuration settings for commander searches."""

    # API settings
    api_base_url: str = "https://api.scryfall.com"
    api_timeout_seconds: int = 15
    user_agent: str = "Commander-Finder/0.1.0"
    min_request_interval: float = 0.1
    max_pages: int = 1

    # Result preferences
    detail_url_source: str = "scryfall"

    # State
    default_theme: str = "light"
    state_file: str = ""

    # Output preferences
    default_output_dir: str = "."
    verbose_output: bool = False


class ConfigManager:
    """Manages application configuration with file persistence."""

    DEFAULT_CONFIG_DIR = Path.home() / ".commander_finder"
    DEFAULT_CONFIG_FILE = "config.json"
    DEFAULT_STATE_FILE = "state.json"

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_dir: Custom configuration directory (defaults to ~/.commander_finder)
        """
        self.config_dir = Path(config_dir) if config_dir else self.DEFAULT_CONFIG_DIR
        self.config_file = self.config_dir / self.DEFAULT_CONFIG_FILE
        self._config = FinderConfig()

        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.load_config()

    def load_config(self) -> FinderConfig:
        """
        Load configuration from file.

        Returns:
            Loaded configuration object
        """
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    config_data = json.load(f)

                for key, value in config_data.items():
                    if not hasattr(self._config, key):
                        continue
                    try:
                        setattr(self._config, key, _coerce(value, getattr(self._config, key)))
                    except (ValueError, TypeError):
                        # Ignore invalid values, like apply_env_overrides does
                        logger.warning(f"Ignoring invalid config value {key}={value!r}")

            except (json.JSONDecodeError, AttributeError, OSError):
                # Corrupted config: keep a backup and start again from defaults
                if self.config_file.exists():
                    backup_file = self.config_file.with_suffix('.json.backup')
                    self.config_file.replace(backup_file)

                self._config = FinderConfig()
                self.save_config()
        else:
            self.save_config()

        return self._config

    def save_config(self) -> None:
        """Save current configuration to file."""
        try:
            config_data = asdict(self._config)

            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(config_data, f, indent=2, sort_keys=True)

        except OSError as e:
            raise RuntimeError(f"Failed to save configuration: {e}")

    def get_config(self) -> FinderConfig:
        """Get current configuration."""
        return self._config

    def update_config(self, **kwargs) -> None:
        """
        Update configuration values.

        Args:
            **kwargs: Configuration values to update
        """
        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
            else:
                raise ValueError(f"Unknown configuration option: {key}")

        self.save_config()

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self._config = FinderConfig()
        self.save_config()

    def get_state_path(self) -> Path:
        """Path of the favorites/theme file, honoring the state_file setting."""
        if self._config.state_file:
            return Path(self._config.state_file).expanduser()
        return self.config_dir / self.DEFAULT_STATE_FILE


def get_default_config() -> FinderConfig:
    """Get default configuration without file persistence."""
    return FinderConfig()


# Environment variable overrides
def apply_env_overrides(config: FinderConfig) -> FinderConfig:
    """
    Apply environment variable overrides to configuration.

    Args:
        config: Base configuration to override

    Returns:
        Configuration with environment overrides applied
    """
    env_mappings = {
        'COMMANDER_FINDER_API_URL': ('api_base_url', str),
        'COMMANDER_FINDER_TIMEOUT': ('api_timeout_seconds', int),
        'COMMANDER_FINDER_MAX_PAGES': ('max_pages', int),
        'COMMANDER_FINDER_DETAIL_SOURCE': ('detail_url_source', str),
        'COMMANDER_FINDER_THEME': ('default_theme', str),
        'COMMANDER_FINDER_STATE_FILE': ('state_file', str),
        'COMMANDER_FINDER_OUTPUT_DIR': ('default_output_dir', str),
        'COMMANDER_FINDER_VERBOSE': ('verbose_output', lambda x: x.lower() == 'true'),
    }

    for env_var, (attr_name, converter) in env_mappings.items():
        env_value = os.getenv(env_var)
        if env_value is not None:
            try:
                setattr(config, attr_name, converter(env_value))
            except (ValueError, TypeError):
                # Ignore invalid environment values
                pass

    return config
