"""
Unit tests for configuration loading, persistence and environment overrides.
"""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from commander_finder.config import ConfigManager, FinderConfig, apply_env_overrides, get_default_config


class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.config_dir = Path(self.temp_dir) / "config"

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_creates_default_config_file(self):
        manager = ConfigManager(self.config_dir)

        self.assertTrue(manager.config_file.exists())
        self.assertEqual(manager.get_config(), FinderConfig())

    def test_loads_existing_values(self):
        self.config_dir.mkdir(parents=True)
        with open(self.config_dir / "config.json", 'w', encoding='utf-8') as f:
            json.dump({'max_pages': 3, 'detail_url_source': 'edhrec', 'unknown_key': 1}, f)

        config = ConfigManager(self.config_dir).get_config()

        self.assertEqual(config.max_pages, 3)
        self.assertEqual(config.detail_url_source, 'edhrec')
        self.assertFalse(hasattr(config, 'unknown_key'))

    def test_loaded_values_coerced_to_field_types(self):
        self.config_dir.mkdir(parents=True)
        with open(self.config_dir / "config.json", 'w', encoding='utf-8') as f:
            json.dump({
                'max_pages': '2',
                'min_request_interval': 1,
                'verbose_output': 'true'
            }, f)

        config = ConfigManager(self.config_dir).get_config()

        self.assertEqual(config.max_pages, 2)
        self.assertIsInstance(config.min_request_interval, float)
        self.assertEqual(config.min_request_interval, 1.0)
        self.assertIs(config.verbose_output, True)

    def test_invalid_loaded_values_ignored(self):
        self.config_dir.mkdir(parents=True)
        with open(self.config_dir / "config.json", 'w', encoding='utf-8') as f:
            json.dump({
                'max_pages': 'lots',
                'api_timeout_seconds': True,
                'api_base_url': 42,
                'verbose_output': 'sometimes',
                'default_theme': 'dark'
            }, f)

        with self.assertLogs('commander_finder.config', level='WARNING'):
            config = ConfigManager(self.config_dir).get_config()

        self.assertEqual(config.max_pages, 1)
        self.assertEqual(config.api_timeout_seconds, 15)
        self.assertEqual(config.api_base_url, "https://api.scryfall.com")
        self.assertFalse(config.verbose_output)
        self.assertEqual(config.default_theme, 'dark')

    def test_corrupt_config_is_backed_up(self):
        self.config_dir.mkdir(parents=True)
        (self.config_dir / "config.json").write_text("{oops", encoding='utf-8')

        manager = ConfigManager(self.config_dir)

        self.assertEqual(manager.get_config(), FinderConfig())
        self.assertTrue((self.config_dir / "config.json.backup").exists())
        self.assertTrue(manager.config_file.exists())

    def test_update_config(self):
        manager = ConfigManager(self.config_dir)
        manager.update_config(default_theme='dark')

        reloaded = ConfigManager(self.config_dir).get_config()
        self.assertEqual(reloaded.default_theme, 'dark')

    def test_update_config_unknown_key(self):
        manager = ConfigManager(self.config_dir)
        with self.assertRaises(ValueError):
            manager.update_config(colour='blue')

    def test_reset_to_defaults(self):
        manager = ConfigManager(self.config_dir)
        manager.update_config(max_pages=5)
        manager.reset_to_defaults()
        self.assertEqual(manager.get_config().max_pages, 1)

    def test_state_path(self):
        manager = ConfigManager(self.config_dir)
        self.assertEqual(manager.get_state_path(), self.config_dir / "state.json")

        custom = Path(self.temp_dir) / "elsewhere.json"
        manager.update_config(state_file=str(custom))
        self.assertEqual(manager.get_state_path(), custom)


class TestEnvOverrides(unittest.TestCase):
    """Test cases for apply_env_overrides."""

    def test_overrides_applied(self):
        env = {
            'COMMANDER_FINDER_MAX_PAGES': '4',
            'COMMANDER_FINDER_THEME': 'dark',
            'COMMANDER_FINDER_VERBOSE': 'TRUE',
        }
        with patch.dict(os.environ, env):
            config = apply_env_overrides(get_default_config())

        self.assertEqual(config.max_pages, 4)
        self.assertEqual(config.default_theme, 'dark')
        self.assertTrue(config.verbose_output)

    def test_invalid_values_ignored(self):
        with patch.dict(os.environ, {'COMMANDER_FINDER_TIMEOUT': 'soon'}):
            config = apply_env_overrides(get_default_config())

        self.assertEqual(config.api_timeout_seconds, 15)


if __name__ == '__main__':
    unittest.main()
