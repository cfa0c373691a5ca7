"""
================================================================================
PYTEST CONFIGURATION
================================================================================

Pytest configuration and shared fixtures for the entire test suite.

Test Isolation Strategy:
    HOSTINFO_HOME points at a fresh temporary directory before any test module
    is imported, so the config file, sqlite database, logs and certificates
    of a test run never touch the real project directories.

Global Fixtures:
    - ensure_test_directories: creates outputs/logs and configs in the temp home
    - memory_database / identity_store: isolated in-memory identity storage
    - system_service: real SystemService with a recording stop callback

================================================================================
"""
import json
import os
import shutil
import sys
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

# Ensure project root is on sys.path for the web_server alias module
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

_TEST_HOME = None
_ORIGINAL_CWD = None

TEST_CONFIG = {
    "web": {
        "host": "127.0.0.1",
        "port": 5000,
        "secure_cookies": False,
        "rate_limit_enabled": False,
        "session_lifetime_hours": 1,
        "allow_registration": True,
        "https": False,
    },
    "database": {
        "connection": "hostinfo.db",
    },
    "identity": {
        "min_username_length": 3,
        "min_password_length": 8,
        "bcrypt_rounds": 4,
    },
    "logging": {
        "level": "INFO",
    },
}


def pytest_configure(config):
    """
    Hook called before test collection starts.
    Set up the isolated home BEFORE any test module imports the server.
    """
    global _TEST_HOME, _ORIGINAL_CWD

    _TEST_HOME = Path(tempfile.mkdtemp(prefix="hostinfo_test_"))
    os.environ['HOSTINFO_HOME'] = str(_TEST_HOME)

    config_dir = _TEST_HOME / 'configs'
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / 'config.json').write_text(json.dumps(TEST_CONFIG, indent=4))

    _ORIGINAL_CWD = os.getcwd()
    os.chdir(_TEST_HOME)


def pytest_unconfigure(config):
    """
    Hook called after all tests finish.
    Restore original directory and clean up.
    """
    if _ORIGINAL_CWD:
        os.chdir(_ORIGINAL_CWD)

    if _TEST_HOME and _TEST_HOME.exists():
        shutil.rmtree(_TEST_HOME, ignore_errors=True)

    os.environ.pop('HOSTINFO_HOME', None)


@pytest.fixture(autouse=True)
def ensure_test_directories():
    """Ensure required directories exist in the temp home."""
    for d in (Path('outputs/logs'), Path('configs'), Path('certs')):
        d.mkdir(parents=True, exist_ok=True)
    yield


@pytest.fixture
def memory_database():
    from hostinfo.core.database import ApplicationDatabase

    database = ApplicationDatabase(':memory:')
    database.ensure_schema()
    yield database
    database.close()


@pytest.fixture
def identity_store(memory_database):
    from hostinfo.core.identity import IdentityStore

    return IdentityStore(memory_database, hash_rounds=4)


@pytest.fixture
def stop_application():
    return Mock()


@pytest.fixture
def system_service(stop_application):
    from hostinfo.core.system_service import SystemService

    return SystemService(stop_application=stop_application)
