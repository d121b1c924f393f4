"""Unit tests for settings persistence and logging setup."""

import json
import logging
import shutil
import tempfile
import unittest
from pathlib import Path

from linkmark.settings import DEFAULTS, SettingsStore, configure_logging, validate_setting


class TestValidateSetting(unittest.TestCase):
    """Test validation of individual settings."""

    def test_link_target(self):
        self.assertTrue(validate_setting('default_link_target', "http://x"))
        self.assertFalse(validate_setting('default_link_target', "  "))
        self.assertFalse(validate_setting('default_link_target', 3))

    def test_log_level(self):
        self.assertTrue(validate_setting('log_level', "debug"))
        self.assertTrue(validate_setting('log_level', "ERROR"))
        self.assertFalse(validate_setting('log_level', "loud"))

    def test_line_length(self):
        self.assertTrue(validate_setting('line_length', 40))
        self.assertTrue(validate_setting('line_length', 120))
        self.assertFalse(validate_setting('line_length', 39))
        self.assertFalse(validate_setting('line_length', "65"))
        self.assertFalse(validate_setting('line_length', True))

    def test_unknown_key_is_valid(self):
        self.assertTrue(validate_setting('future_option', object()))


class TestSettingsStore(unittest.TestCase):
    """Test reading and writing the settings file."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.store = SettingsStore(Path(self.temp_dir))

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def write_file(self, text):
        self.store.path.write_text(text, encoding='utf-8')

    def test_defaults_without_file(self):
        self.assertEqual(self.store.load(), DEFAULTS)
        self.assertEqual(self.store.get('default_link_target'), "#")

    def test_set_persists(self):
        self.assertTrue(self.store.set('line_length', 80))

        fresh = SettingsStore(Path(self.temp_dir))
        self.assertEqual(fresh.get('line_length'), 80)
        self.assertFalse(self.store.path.with_suffix('.tmp').exists())

    def test_set_rejects_invalid_value(self):
        with self.assertLogs('linkmark.settings', level='WARNING'):
            self.assertFalse(self.store.set('line_length', 5))
        self.assertFalse(self.store.path.exists())

    def test_invalid_value_on_disk_uses_default(self):
        self.write_file(json.dumps({'line_length': 500, 'log_level': 'INFO'}))

        with self.assertLogs('linkmark.settings', level='WARNING') as logs:
            settings = self.store.load()

        self.assertEqual(settings['line_length'], 65)
        self.assertEqual(settings['log_level'], 'INFO')
        self.assertIn("line_length", logs.output[0])

    def test_corrupt_file_uses_defaults(self):
        self.write_file("{not json")

        with self.assertLogs('linkmark.settings', level='WARNING'):
            self.assertEqual(self.store.load(), DEFAULTS)

    def test_non_dict_file_uses_defaults(self):
        self.write_file("[1, 2]")

        with self.assertLogs('linkmark.settings', level='WARNING'):
            self.assertEqual(self.store.load(), DEFAULTS)

    def test_unknown_keys_survive_save(self):
        self.write_file(json.dumps({'future_option': [1]}))

        self.store.set('log_level', 'DEBUG')

        with open(self.store.path, encoding='utf-8') as f:
            data = json.load(f)
        self.assertEqual(data['future_option'], [1])
        self.assertEqual(data['log_level'], 'DEBUG')

    def test_load_returns_copy(self):
        settings = self.store.load()
        settings['line_length'] = 99
        self.assertEqual(self.store.get('line_length'), 65)

    def test_clear_cache_rereads_file(self):
        self.store.load()
        self.write_file(json.dumps({'default_link_target': "http://y"}))

        self.assertEqual(self.store.get('default_link_target'), "#")
        self.store.clear_cache()
        self.assertEqual(self.store.get('default_link_target'), "http://y")


class TestConfigureLogging(unittest.TestCase):
    """Test that logging goes to a file."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        root = logging.getLogger()
        self.saved_handlers = root.handlers[:]
        self.saved_level = root.level

    def tearDown(self):
        root = logging.getLogger()
        for handler in root.handlers:
            handler.close()
        root.handlers = self.saved_handlers
        root.setLevel(self.saved_level)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_writes_log_file(self):
        log_file = configure_logging('info', Path(self.temp_dir) / "logs")

        logging.getLogger('linkmark.test').info("hello log")
        for handler in logging.getLogger().handlers:
            handler.flush()

        self.assertEqual(log_file.name, "linkmark.log")
        self.assertIn("hello log", log_file.read_text(encoding='utf-8'))
        self.assertEqual(logging.getLogger().level, logging.INFO)


if __name__ == '__main__':
    unittest.main()
