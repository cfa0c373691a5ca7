"""
================================================================================
MODELS - Snapshot and Value Records
================================================================================

Read-only records produced by the system service and the identity store.

Records:
    PackageRecord      - Installed package location and version
    RuntimeInformation - Operating system and interpreter description
    ProcessInformation - Current process resource usage
    SystemEnvironment  - Host and environment facts visible to the process
    IdentityUser       - Registered user account

All records are frozen dataclasses: they are created once per call and never
modified afterwards.

Last Modified: October 2026
================================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Architecture(Enum):
    """Processor architecture of the host or the running interpreter."""
    X86 = 0
    X64 = 1
    ARM = 2
    ARM64 = 3
    S390X = 4
    PPC64LE = 5
    LOONGARCH64 = 6
    RISCV64 = 7
    UNKNOWN = 99

    @classmethod
    def from_machine(cls, machine: str) -> 'Architecture':
        """Map a platform.machine() string to an Architecture member."""
        return _MACHINE_ALIASES.get((machine or '').strip().lower(), cls.UNKNOWN)


_MACHINE_ALIASES = {
    'i386': Architecture.X86,
    'i486': Architecture.X86,
    'i586': Architecture.X86,
    'i686': Architecture.X86,
    'x86': Architecture.X86,
    'x86_64': Architecture.X64,
    'amd64': Architecture.X64,
    'x64': Architecture.X64,
    'arm': Architecture.ARM,
    'armv6l': Architecture.ARM,
    'armv7l': Architecture.ARM,
    'armv8l': Architecture.ARM,
    'aarch64': Architecture.ARM64,
    'arm64': Architecture.ARM64,
    's390x': Architecture.S390X,
    'ppc64le': Architecture.PPC64LE,
    'loongarch64': Architecture.LOONGARCH64,
    'riscv64': Architecture.RISCV64,
}


@dataclass(frozen=True)
class PackageRecord:
    """An installed package: where its file lives and which version it is."""
    file_path: str = ""
    version: str = ""


@dataclass(frozen=True)
class RuntimeInformation:
    """
    Operating system and runtime description.

    Attributes:
        framework_description: Interpreter name and version, e.g. 'CPython 3.12.4'
        os_architecture: Architecture of the host operating system
        os_description: Operating system name, release and build
        process_architecture: Architecture the interpreter was built for
        runtime_identifier: Platform tag the runtime was built for, e.g. 'linux-x86_64'
    """
    framework_description: Optional[str] = None
    os_architecture: Architecture = Architecture.UNKNOWN
    os_description: Optional[str] = None
    process_architecture: Architecture = Architecture.UNKNOWN
    runtime_identifier: Optional[str] = None


@dataclass(frozen=True)
class ProcessInformation:
    """
    Resource usage of the current process.

    Counters the host platform does not expose are left as None.
    Memory sizes are in bytes, processor times are durations.
    """
    process_id: int
    process_name: Optional[str] = None
    base_priority: Optional[int] = None
    handle_count: Optional[int] = None
    threads_count: Optional[int] = None
    start_time: Optional[datetime] = None
    working_set: Optional[int] = None
    peak_working_set: Optional[int] = None
    virtual_memory_size: Optional[int] = None
    private_memory_size: Optional[int] = None
    processor_affinity: List[int] = field(default_factory=list)
    user_processor_time: timedelta = timedelta(0)
    privileged_processor_time: timedelta = timedelta(0)
    total_processor_time: timedelta = timedelta(0)


@dataclass(frozen=True)
class SystemEnvironment:
    """
    Host and environment facts visible to the process.

    variables is a copy of the process environment taken at collection time.
    """
    is_64bit_operating_system: bool
    is_64bit_process: bool
    is_privileged_process: bool
    machine_name: str
    os_version: str
    process_id: int
    processor_count: int
    system_page_size: int
    version: str
    working_set: int
    variables: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class IdentityUser:
    id: int
    user_name: str
    password_hash: str = field(repr=False)
    email: Optional[str] = None
    created_at: Optional[str] = None
    roles: Tuple[str, ...] = ()

    def is_in_role(self, role: str) -> bool:
        return role in self.roles


@dataclass(frozen=True)
class ChangePasswordRequest:
    current_password: str = ""
    new_password: str = ""
