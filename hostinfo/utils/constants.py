"""
================================================================================
CONSTANTS - System-Wide Configuration Values
================================================================================

Centralized repository for hardcoded constants used throughout the
application. Organized by functional category.

Constant Categories:
    1. File Paths - Directory and file locations
    2. Identity - Role names and password hashing settings
    3. Security - Web UI session, CSRF and rate limit settings

File Path Constants:
    All paths are relative to BASE_DIR, which is $HOSTINFO_HOME when set
    and the current working directory otherwise.
    Supports monkeypatching for test isolation

    Example:
        CONFIG_FILE = BASE_DIR / 'configs' / 'config.json'
        LOG_DIR = OUTPUT_DIR / 'logs'

Usage:
    from hostinfo.utils.constants import CONFIG_FILE, LOGIN_RATE_LIMIT

Note:
    Values in this file are STATIC. For runtime-configurable settings,
    use config.json via hostinfo.utils.config module.

Last Modified: October 2026
================================================================================
"""

import os
from pathlib import Path

# ==========================================
# FILE PATHS
# ==========================================
BASE_DIR = Path(os.environ.get('HOSTINFO_HOME') or Path.cwd())
OUTPUT_DIR = BASE_DIR / 'outputs'
LOG_DIR = OUTPUT_DIR / 'logs'
AUDIT_LOG_FILE = LOG_DIR / 'audit.log'
CONFIG_FILE = BASE_DIR / 'configs' / 'config.json'
CERT_DIR = BASE_DIR / 'certs'

PACKAGE_DIR = Path(__file__).resolve().parents[1]
TEMPLATE_DIR = PACKAGE_DIR / 'web' / 'templates'
STATIC_DIR = PACKAGE_DIR / 'web' / 'static'

# ==========================================
# IDENTITY
# ==========================================
ADMINISTRATOR_ROLE = 'Administrator'
BCRYPT_COST_FACTOR = 12

# ==========================================
# SECURITY CONSTANTS
# ==========================================
"""
Web UI security configuration
"""
LOGIN_RATE_LIMIT = "5 per 15 minutes"
API_RATE_LIMIT = "100 per hour"
CSRF_TOKEN_ROTATION_INTERVAL = 3600  # seconds
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = 'Lax'
