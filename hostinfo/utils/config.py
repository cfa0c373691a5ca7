"""
Configuration for the web server, identity rules, database and logging.

Values come from configs/config.json, deep-merged over DEFAULT_CONFIG so new
keys appear in existing installations on the next start.
"""

import copy
import json
from pathlib import Path
import logging

logger = logging.getLogger("hostinfo")

DEFAULT_CONFIG = {
    "web": {
        "host": "0.0.0.0",
        "port": 5000,
        "secure_cookies": True,
        "rate_limit_enabled": True,
        "session_lifetime_hours": 24,
        "allow_registration": True,
        "https": True,
    },
    "database": {
        # sqlite file path, relative paths resolve against BASE_DIR
        "connection": "hostinfo.db",
    },
    "identity": {
        "min_username_length": 3,
        "min_password_length": 8,
        "bcrypt_rounds": 12,
    },
    "logging": {
        "level": "INFO",
    },
}


def load_config(config_file: Path = None):
    """
    Load configuration from config.json with sensible defaults

    Args:
        config_file: Optional path override, defaults to CONFIG_FILE

    Returns:
        dict: Configuration dictionary
    """
    if config_file is None:
        from .constants import CONFIG_FILE
        config_file = CONFIG_FILE

    defaults = copy.deepcopy(DEFAULT_CONFIG)

    if not config_file.exists():
        _save_config(config_file, defaults)
        return defaults

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = json.load(f)

        # Merge with defaults to ensure all keys exist
        merged = _deep_merge(defaults, config)

        # Save merged config back if anything was added
        if merged != config:
            _save_config(config_file, merged)

        return merged
    except json.JSONDecodeError as e:
        logger.error(f"Config file corrupted: {e}. Using defaults.")
        return defaults
    except OSError as e:
        logger.error(f"Error loading config: {e}. Using defaults.")
        return defaults


def _deep_merge(defaults: dict, override: dict) -> dict:
    """
    Deep merge override config into defaults, preserving new defaults

    Args:
        defaults: Default configuration
        override: User-provided configuration

    Returns:
        dict: Merged configuration
    """
    result = defaults.copy()
    for key, value in override.items():
        if key in defaults and isinstance(defaults[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(defaults[key], value)
        else:
            result[key] = value
    return result


def _save_config(config_file: Path, config: dict):
    """
    Save configuration to file

    Args:
        config_file: Path to config file
        config: Configuration dictionary
    """
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=4)
    except OSError as e:
        logger.error(f"Failed to save config: {e}")


def resolve_connection(config: dict) -> str:
    """
    Resolve the database connection setting to a sqlite location.

    Relative paths are anchored at BASE_DIR; ':memory:' is passed through.
    """
    from .constants import BASE_DIR

    connection = config.get('database', {}).get('connection') or DEFAULT_CONFIG['database']['connection']
    if connection == ':memory:':
        return connection
    path = Path(connection)
    if not path.is_absolute():
        path = BASE_DIR / path
    return str(path)
