"""
================================================================================
LOGGER - Unified Logging Configuration
================================================================================

Centralized logging infrastructure for all application contexts.

Logging Contexts:
    - 'cli' - Launcher and command-line operations
    - 'web' - Web UI server and API requests
    - 'test' - Unit and integration tests
    - 'imported' - Library/module imports (minimal logging)

Log Destinations:
    1. File Logs - outputs/logs/{timestamp}.{context}.log
    2. Console Output - stdout
    3. Rotating Backups - 5MB max per file, 5 backup files
    4. Audit Log - outputs/logs/audit.log (security-relevant actions only)

Log Format:
    {timestamp} {level} [{context}]: {message}
    Example: 2026-10-19 10:30:45 INFO [web]: User admin logged in

Usage:
    from hostinfo.utils.logger import set_run_context, logger

    set_run_context('web')
    logger.info('Starting web server')

Last Modified: October 2026
================================================================================
"""

import sys
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler

logger = logging.getLogger("hostinfo")
logger.setLevel(logging.INFO)

audit_logger = logging.getLogger("hostinfo.audit")
audit_logger.setLevel(logging.INFO)
audit_logger.propagate = False

LOG_FORMAT = "%(asctime)s %(levelname)s [%(run_context)s]: %(message)s"
AUDIT_FORMAT = '%(asctime)s - %(levelname)s - USER:%(user)s - IP:%(ip)s - ACTION:%(action)s - DETAILS:%(details)s'

# Global run context state
_RUN_CONTEXT = 'imported'


class RunContextFilter(logging.Filter):
    """
    Logging filter that adds run context to all log records
    Allows distinguishing between different execution contexts
    """

    def filter(self, record):
        record.run_context = _RUN_CONTEXT
        return True


def get_run_context() -> str:
    return _RUN_CONTEXT


def set_run_context(context: str, level=logging.INFO):
    """
    Set the execution context for logging

    Args:
        context: String identifier ('web', 'cli', 'test', etc)
        level: Level applied to the application logger and its handlers
    """
    global _RUN_CONTEXT
    _RUN_CONTEXT = context

    # Clear existing handlers
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    logger.setLevel(level)

    # Setup file handler with rotating backups
    from hostinfo.utils.constants import LOG_DIR

    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        log_file = LOG_DIR / f"{timestamp}.{context}.log"

        file_handler = RotatingFileHandler(
            str(log_file),
            maxBytes=5_000_000,  # 5MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        file_handler.addFilter(RunContextFilter())
        logger.addHandler(file_handler)
    except OSError as e:
        # Read-only or missing log directory: console logging still works
        print(f"Logging to file disabled: {e}", file=sys.stderr)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    console_handler.addFilter(RunContextFilter())
    logger.addHandler(console_handler)


def setup_audit_logging():
    """Attach the audit file handler once; returns the audit logger."""
    from hostinfo.utils.constants import AUDIT_LOG_FILE

    if not audit_logger.handlers:
        AUDIT_LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        audit_handler = logging.FileHandler(AUDIT_LOG_FILE, encoding='utf-8')
        audit_handler.setFormatter(logging.Formatter(AUDIT_FORMAT))
        audit_logger.addHandler(audit_handler)
    return audit_logger


def setup_logging(context: str = 'imported', level_name: str = 'INFO'):
    """
    Initialize logging for the application

    Args:
        context: Execution context identifier
        level_name: Logging level name from config ('DEBUG', 'INFO', ...)
    """
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO
    set_run_context(context, level)
    return logger
