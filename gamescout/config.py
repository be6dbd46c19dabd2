"""Configuration loading and logging setup."""
import json
import logging
import os
from typing import Any, Dict, Optional

from .errors import ConfigError
from .repositories.base import check_key

DEFAULT_CONFIG: Dict[str, Any] = {
    'storage_backend': 'file',
    'storage_dir': '.gamescout',
    'database_url': 'sqlite:///gamescout.db',
    'storage_key': 'gameWishlist',
    'cache_ttl_ms': 100,
    'max_value_bytes': None,
    'log_level': 'WARNING',
}

STORAGE_BACKENDS = ('file', 'sql', 'memory')

# Environment variable -> config key.  Environment wins over the file.
ENV_OVERRIDES = {
    'GAMESCOUT_STORAGE_BACKEND': 'storage_backend',
    'GAMESCOUT_STORAGE_DIR': 'storage_dir',
    'DATABASE_URL': 'database_url',
    'GAMESCOUT_STORAGE_KEY': 'storage_key',
    'GAMESCOUT_CACHE_TTL_MS': 'cache_ttl_ms',
    'GAMESCOUT_MAX_VALUE_BYTES': 'max_value_bytes',
    'GAMESCOUT_LOG_LEVEL': 'log_level',
}


def setup_logging(level: str = 'WARNING') -> logging.Logger:
    """Configure the root GameScout logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to WARNING so normal use is quiet.

    Returns:
        Configured logger instance.
    """
    numeric = getattr(logging, str(level).upper(), logging.WARNING)
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logger = logging.getLogger('gamescout')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from a JSON file with environment variable support.

    A missing file (or no path) yields the defaults.  Environment variables
    listed in :data:`ENV_OVERRIDES` take precedence over file values.

    Raises:
        ConfigError: If the file is not a JSON object or a value is invalid.
    """
    config = dict(DEFAULT_CONFIG)

    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                loaded = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise ConfigError(f"Error parsing config file {config_path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {config_path} must hold a JSON object")
        config.update(loaded)

    for env_name, key in ENV_OVERRIDES.items():
        if os.getenv(env_name):
            config[key] = os.getenv(env_name)

    return _validate(config)


def _validate(config: Dict[str, Any]) -> Dict[str, Any]:
    backend = str(config['storage_backend']).lower()
    if backend not in STORAGE_BACKENDS:
        raise ConfigError(
            f"storage_backend must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}")
    config['storage_backend'] = backend

    try:
        check_key(config['storage_key'])
    except ValueError as e:
        raise ConfigError(f"storage_key: {e}") from e

    try:
        config['cache_ttl_ms'] = float(config['cache_ttl_ms'])
    except (TypeError, ValueError):
        raise ConfigError(f"cache_ttl_ms must be a number, got {config['cache_ttl_ms']!r}")
    if config['cache_ttl_ms'] < 0:
        raise ConfigError("cache_ttl_ms must not be negative")

    quota = config.get('max_value_bytes')
    if quota in (None, ''):
        config['max_value_bytes'] = None
    else:
        try:
            config['max_value_bytes'] = int(quota)
        except (TypeError, ValueError):
            raise ConfigError(f"max_value_bytes must be an integer, got {quota!r}")
        if config['max_value_bytes'] < 0:
            raise ConfigError("max_value_bytes must not be negative")

    return config
