"""
Unit tests for configuration management.
"""

import json
import unittest
import tempfile
import shutil
from pathlib import Path
from secondseat.config import (
    Config,
    ConfigManager,
    ConfigError,
    load_config,
)


class TestConfigDefaults(unittest.TestCase):
    """Tests for the configuration data class."""

    def test_defaults(self):
        """Test Config default values."""
        config = Config()
        self.assertEqual(config.primary_name, "secondseat")
        self.assertEqual(config.settle_delay, 0.5)
        self.assertIsNone(config.command_timeout)
        self.assertEqual(config.xinput_command, "xinput")
        self.assertEqual(config.min_xserver_version, "1.20")
        self.assertFalse(config.skip_version_check)
        self.assertFalse(config.cleanup_on_failure)
        self.assertFalse(config.verbose)


class TestConfigManager(unittest.TestCase):
    """Tests for ConfigManager."""

    def setUp(self):
        """Create temporary config directory."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_dir = Path(self.temp_dir)
        self.manager = ConfigManager(self.config_dir)

    def tearDown(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def write_config(self, data):
        with open(self.config_dir / "config.json", "w") as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)

    def test_load_default_config(self):
        """Test loading config when file doesn't exist."""
        config = self.manager.load_config()
        self.assertEqual(config, Config())
        self.assertFalse((self.config_dir / "config.json").exists())

    def test_save_and_load_config(self):
        """Test saving and loading config."""
        config = Config(primary_name="guest", settle_delay=1.0,
                        command_timeout=10, cleanup_on_failure=True)

        self.manager.save_config(config)

        new_manager = ConfigManager(self.config_dir)
        loaded = new_manager.load_config()
        self.assertEqual(loaded, config)

    def test_partial_config(self):
        """Test missing settings keep their defaults."""
        self.write_config({"primary_name": "guest"})
        config = self.manager.load_config()
        self.assertEqual(config.primary_name, "guest")
        self.assertEqual(config.settle_delay, 0.5)

    def test_int_accepted_for_float(self):
        """Test whole numbers are fine for float settings."""
        self.write_config({"settle_delay": 2, "command_timeout": 3})
        config = self.manager.load_config()
        self.assertEqual(config.settle_delay, 2)
        self.assertEqual(config.command_timeout, 3)

    def test_unknown_settings_ignored(self):
        """Test unknown keys are skipped with a warning."""
        self.write_config({"primary_name": "guest", "cursor_theme": "dark"})
        with self.assertLogs("secondseat.config.config", level="WARNING") as logs:
            config = self.manager.load_config()
        self.assertEqual(config.primary_name, "guest")
        self.assertIn("cursor_theme", logs.output[0])

    def test_invalid_json_uses_defaults(self):
        """Test an unreadable file falls back to defaults."""
        self.write_config("{not json")
        config = self.manager.load_config()
        self.assertEqual(config, Config())

    def test_wrong_types_rejected(self):
        """Test settings with the wrong JSON type raise ConfigError."""
        bad_values = [
            {"primary_name": 3},
            {"settle_delay": "fast"},
            {"settle_delay": True},
            {"skip_version_check": "yes"},
            {"command_timeout": [1]},
        ]
        for data in bad_values:
            with self.subTest(data=data):
                self.write_config(data)
                with self.assertRaises(ConfigError):
                    ConfigManager(self.config_dir).load_config()

    def test_invalid_values_rejected(self):
        """Test out of range settings raise ConfigError."""
        bad_values = [
            {"settle_delay": -1},
            {"command_timeout": 0},
            {"primary_name": ""},
        ]
        for data in bad_values:
            with self.subTest(data=data):
                self.write_config(data)
                with self.assertRaises(ConfigError):
                    ConfigManager(self.config_dir).load_config()

    def test_non_object_rejected(self):
        """Test a JSON list is not a config."""
        self.write_config([1, 2])
        with self.assertRaises(ConfigError):
            self.manager.load_config()

    def test_load_is_cached(self):
        """Test the file is read once per manager."""
        first = self.manager.load_config()
        self.write_config({"primary_name": "guest"})
        self.assertIs(self.manager.load_config(), first)

    def test_reset_to_defaults(self):
        """Test reset writes the defaults to disk."""
        self.write_config({"primary_name": "guest"})
        self.manager.load_config()

        self.manager.reset_to_defaults()

        with open(self.config_dir / "config.json") as f:
            data = json.load(f)
        self.assertEqual(data["primary_name"], "secondseat")
        self.assertEqual(data["settle_delay"], 0.5)

    def test_save_creates_directory(self):
        """Test saving into a missing directory creates it."""
        nested = self.config_dir / "nested" / "secondseat"
        ConfigManager(nested).save_config(Config())
        self.assertTrue((nested / "config.json").exists())

    def test_save_into_file_path(self):
        """Test an unwritable location raises ConfigError."""
        blocker = self.config_dir / "blocker"
        blocker.write_text("")
        with self.assertRaises(ConfigError):
            ConfigManager(blocker / "secondseat").save_config(Config())

    def test_old_version_key_ignored(self):
        """Test files from older releases still load."""
        self.write_config({"version": 1, "primary_name": "guest"})
        with self.assertLogs("secondseat.config.config", level="WARNING"):
            config = self.manager.load_config()
        self.assertEqual(config.primary_name, "guest")

    def test_load_config_function(self):
        """Test the module level helper."""
        self.write_config({"settle_delay": 0})
        self.assertEqual(load_config(self.config_dir).settle_delay, 0)


if __name__ == "__main__":
    unittest.main()
