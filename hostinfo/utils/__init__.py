"""
================================================================================
UTILS MODULE - Shared Utilities and Helpers
================================================================================

Shared infrastructure used across all application components.

Exported Functions:
    Logging:
        - setup_logging() - Initialize logging infrastructure
        - set_run_context(context) - Set execution context
        - logger - Main application logger

    Configuration:
        - load_config() - Load configuration from config.json
        - resolve_connection() - Database location from config

    JSON:
        - get_default_options() - Shared camelCase JSON settings
        - configure() - Apply JSON settings to caller-owned options

Usage:
    from hostinfo.utils import logger, load_config
    from hostinfo.utils.constants import LOGIN_RATE_LIMIT

Last Modified: October 2026
================================================================================
"""

from .logger import setup_logging, set_run_context, logger
from .config import load_config, resolve_connection
from .json_options import get_default_options, configure

__all__ = [
    'setup_logging',
    'set_run_context',
    'logger',
    'load_config',
    'resolve_connection',
    'get_default_options',
    'configure',
]
