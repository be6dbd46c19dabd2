#!/usr/bin/env python3
"""
Unit tests for configuration loading, logging setup and the CLI front end.

Run with:
    python -m pytest tests/test_config_cli.py
"""
import io
import json
import logging
import os
import shutil
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gamescout import cli
from gamescout.config import DEFAULT_CONFIG, load_config, setup_logging
from gamescout.errors import ConfigError
from gamescout.repositories import (
    FileKeyValueStore, MemoryKeyValueStore, SqlKeyValueStore,
)

CLEAN_ENV = {k: v for k, v in os.environ.items()
             if not k.startswith('GAMESCOUT_') and k != 'DATABASE_URL'}


class TmpDirMixin(unittest.TestCase):
    """Creates a fresh temp directory for each test and cd's into it."""

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self._orig = os.getcwd()
        os.chdir(self.tmp)
        self._env = patch.dict(os.environ, CLEAN_ENV, clear=True)
        self._env.start()

    def tearDown(self):
        self._env.stop()
        os.chdir(self._orig)
        shutil.rmtree(self.tmp, ignore_errors=True)

    def _write_config(self, data) -> str:
        path = os.path.join(self.tmp, 'config.json')
        with open(path, 'w') as f:
            json.dump(data, f)
        return path


# ===========================================================================
# Configuration
# ===========================================================================

class TestLoadConfig(TmpDirMixin):

    def test_defaults_without_file(self):
        config = load_config(None)
        self.assertEqual(config['storage_backend'], 'file')
        self.assertEqual(config['storage_key'], 'gameWishlist')
        self.assertEqual(config['cache_ttl_ms'], 100.0)
        self.assertIsNone(config['max_value_bytes'])

    def test_missing_file_means_defaults(self):
        config = load_config(os.path.join(self.tmp, 'nope.json'))
        self.assertEqual(config['storage_dir'], DEFAULT_CONFIG['storage_dir'])

    def test_file_values_override_defaults(self):
        path = self._write_config({'storage_backend': 'memory', 'cache_ttl_ms': 250})
        config = load_config(path)
        self.assertEqual(config['storage_backend'], 'memory')
        self.assertEqual(config['cache_ttl_ms'], 250.0)

    def test_env_overrides_file(self):
        path = self._write_config({'storage_backend': 'memory'})
        with patch.dict(os.environ, {'GAMESCOUT_STORAGE_BACKEND': 'SQL',
                                     'DATABASE_URL': 'sqlite:///x.db',
                                     'GAMESCOUT_MAX_VALUE_BYTES': '5000'}):
            config = load_config(path)
        self.assertEqual(config['storage_backend'], 'sql')
        self.assertEqual(config['database_url'], 'sqlite:///x.db')
        self.assertEqual(config['max_value_bytes'], 5000)

    def test_invalid_storage_key_raises(self):
        with patch.dict(os.environ, {'GAMESCOUT_STORAGE_KEY': 'my wishlist'}):
            with self.assertRaises(ConfigError):
                load_config(None)
        with self.assertRaises(ConfigError):
            load_config(self._write_config({'storage_key': '../escape'}))

    def test_malformed_json_raises(self):
        path = os.path.join(self.tmp, 'config.json')
        with open(path, 'w') as f:
            f.write('{"storage_backend": ')
        with self.assertRaises(ConfigError):
            load_config(path)

    def test_non_object_raises(self):
        with self.assertRaises(ConfigError):
            load_config(self._write_config(['file']))

    def test_invalid_values_raise(self):
        for bad in ({'storage_backend': 'redis'},
                    {'cache_ttl_ms': 'soon'},
                    {'cache_ttl_ms': -5},
                    {'max_value_bytes': 'lots'},
                    {'max_value_bytes': -1}):
            with self.subTest(bad=bad):
                with self.assertRaises(ConfigError):
                    load_config(self._write_config(bad))


class TestSetupLogging(unittest.TestCase):

    def test_sets_level_and_single_handler(self):
        logger = setup_logging('debug')
        setup_logging('INFO')
        self.assertEqual(logger.name, 'gamescout')
        self.assertEqual(logger.level, logging.INFO)
        self.assertEqual(len(logger.handlers), 1)
        setup_logging('WARNING')

    def test_unknown_level_falls_back_to_warning(self):
        self.assertEqual(setup_logging('chatty').level, logging.WARNING)


# ===========================================================================
# Wiring
# ===========================================================================

class TestBuildService(TmpDirMixin):

    def test_build_store_per_backend(self):
        config = load_config(None)
        self.assertIsInstance(cli.build_store(config), FileKeyValueStore)
        config['storage_backend'] = 'memory'
        self.assertIsInstance(cli.build_store(config), MemoryKeyValueStore)
        config['storage_backend'] = 'sql'
        config['database_url'] = f"sqlite:///{os.path.join(self.tmp, 'w.db')}"
        store = cli.build_store(config)
        self.assertIsInstance(store, SqlKeyValueStore)
        store.engine.dispose()

    def test_build_service_uses_config(self):
        config = load_config(self._write_config({'storage_key': 'myList',
                                                 'cache_ttl_ms': 250,
                                                 'max_value_bytes': 10}))
        store = MemoryKeyValueStore()
        svc = cli.build_service(config, store=store)
        self.assertEqual(svc.key, 'myList')
        self.assertAlmostEqual(svc.cache.ttl_seconds, 0.25)
        self.assertEqual(cli.build_store(config).max_value_bytes, 10)


# ===========================================================================
# Command line
# ===========================================================================

class TestMain(TmpDirMixin):

    def run_cli(self, *argv):
        config = self._write_config({'storage_dir': os.path.join(self.tmp, 'store')})
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli.main(['--config', config] + list(argv))
        return code, out.getvalue()

    def test_list_empty(self):
        code, out = self.run_cli('list')
        self.assertEqual(code, 0)
        self.assertIn('empty', out)

    def test_add_list_contains(self):
        self.assertEqual(self.run_cli('add', '42', 'Chrono Trigger', '--cover', 'co1x2y')[0], 0)
        code, out = self.run_cli('list')
        self.assertIn('Chrono Trigger', out)
        self.assertIn('t_cover_big/co1x2y.jpg', out)
        self.assertEqual(self.run_cli('contains', '42')[0], 0)
        self.assertEqual(self.run_cli('contains', '43')[0], 1)

    def test_toggle_and_remove(self):
        self.run_cli('toggle', '42', 'Chrono Trigger')
        self.assertEqual(self.run_cli('contains', '42')[0], 0)
        self.run_cli('toggle', '42', 'Chrono Trigger')
        self.assertEqual(self.run_cli('contains', '42')[0], 1)
        self.run_cli('add', '7', 'Doom')
        code, out = self.run_cli('remove', '7')
        self.assertEqual(code, 0)
        self.assertIn('Removed', out)

    def test_write_failure_exit_code(self):
        with patch.object(FileKeyValueStore, '_write', return_value=False):
            code, out = self.run_cli('add', '42', 'Chrono Trigger')
        self.assertEqual(code, 1)
        self.assertIn('not changed', out)

    def test_bad_storage_key_exit_code(self):
        with patch.dict(os.environ, {'GAMESCOUT_STORAGE_KEY': 'my wishlist'}):
            code, out = self.run_cli('list')
        self.assertEqual(code, 1)
        self.assertIn('storage_key', out)

    def test_bad_config_exit_code(self):
        path = os.path.join(self.tmp, 'broken.json')
        with open(path, 'w') as f:
            f.write('{{')
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli.main(['--config', path, 'list'])
        self.assertEqual(code, 1)
        self.assertIn('Error', out.getvalue())


if __name__ == '__main__':
    unittest.main()
