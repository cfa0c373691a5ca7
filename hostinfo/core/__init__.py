"""
================================================================================
CORE MODULE - Domain Logic
================================================================================

Services and records independent of the web framework.

Exported Classes:
    SystemService       - OS, process and environment snapshots
    ApplicationDatabase - sqlite binding for the identity schema
    IdentityStore       - User, credential and role operations
    PackageRecord, RuntimeInformation, ProcessInformation, SystemEnvironment

Exported Exceptions:
    RetrievalError, NotFoundError, UserExistsError, InvalidCredentialsError

Usage:
    from hostinfo.core import SystemService

    snapshot = SystemService().get_environment()

Last Modified: October 2026
================================================================================
"""

from hostinfo.core.database import ApplicationDatabase
from hostinfo.core.exceptions import (
    HostInfoError,
    RetrievalError,
    NotFoundError,
    UserExistsError,
    InvalidCredentialsError,
)
from hostinfo.core.identity import IdentityStore
from hostinfo.core.models import (
    Architecture,
    PackageRecord,
    RuntimeInformation,
    ProcessInformation,
    SystemEnvironment,
    IdentityUser,
)
from hostinfo.core.system_service import SystemService

__all__ = [
    'ApplicationDatabase',
    'IdentityStore',
    'SystemService',
    'Architecture',
    'PackageRecord',
    'RuntimeInformation',
    'ProcessInformation',
    'SystemEnvironment',
    'IdentityUser',
    'HostInfoError',
    'RetrievalError',
    'NotFoundError',
    'UserExistsError',
    'InvalidCredentialsError',
]
