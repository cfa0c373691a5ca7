"""
================================================================================
SYSTEM SERVICE - Host, Process and Environment Information
================================================================================

Reads facts about the operating system, the running interpreter process and
the process environment, and returns them as read-only snapshot records.

Operations:
    get_os_information()      -> RuntimeInformation
    get_process_information() -> ProcessInformation
    get_environment()         -> SystemEnvironment
    get_version()             -> str
    shutdown_application()    -> None

Every snapshot is collected fresh on each call. The three snapshot calls are
independent of each other and can be made in any order.

Error Handling:
    Any failure of the underlying platform query is raised as RetrievalError
    (chained from the original exception). Nothing is retried or swallowed.

Dependencies:
    - platform/sys/os/sysconfig for interpreter and host facts
    - psutil for process introspection

Last Modified: October 2026
================================================================================
"""

import mmap
import os
import platform
import signal
import socket
import struct
import sys
import sysconfig
import threading
from datetime import datetime, timedelta

import psutil

import hostinfo
from hostinfo.core.exceptions import RetrievalError
from hostinfo.core.models import (
    Architecture,
    ProcessInformation,
    RuntimeInformation,
    SystemEnvironment,
)
from hostinfo.utils.logger import logger


def _default_stop_application():
    """Interrupt the current process shortly, after the pending response is sent."""
    timer = threading.Timer(1.0, os.kill, (os.getpid(), signal.SIGINT))
    timer.daemon = True
    timer.start()


class SystemService:
    """
    Query system runtime information for the current host and process.

    Args:
        stop_application: Callable invoked by shutdown_application(); defaults
            to sending SIGINT to the current process
    """

    def __init__(self, stop_application=None):
        self._stop_application = stop_application or _default_stop_application

    def get_os_information(self) -> RuntimeInformation:
        """
        Describe the operating system and interpreter.

        Raises:
            RetrievalError: platform facts could not be read
        """
        try:
            implementation = platform.python_implementation()
            uname = platform.uname()
            process_bits = struct.calcsize('P') * 8
            return RuntimeInformation(
                framework_description=f"{implementation} {platform.python_version()}",
                os_architecture=Architecture.from_machine(uname.machine),
                os_description=f"{uname.system} {uname.release} {uname.version}".strip(),
                process_architecture=_process_architecture(uname.machine, process_bits),
                runtime_identifier=sysconfig.get_platform(),
            )
        except (OSError, RuntimeError, ValueError) as e:
            raise RetrievalError('operating system information', e) from e

    def get_process_information(self) -> ProcessInformation:
        """
        Describe the resource usage of the current process.

        Raises:
            RetrievalError: the process could not be inspected
        """
        try:
            process = psutil.Process(os.getpid())
            with process.oneshot():
                memory = process.memory_info()
                cpu_times = process.cpu_times()
                return ProcessInformation(
                    process_id=process.pid,
                    process_name=process.name(),
                    base_priority=process.nice() if os.name == 'posix' else None,
                    handle_count=_handle_count(process),
                    threads_count=process.num_threads(),
                    start_time=datetime.fromtimestamp(process.create_time()),
                    working_set=memory.rss,
                    peak_working_set=_peak_working_set(memory),
                    virtual_memory_size=memory.vms,
                    private_memory_size=getattr(memory, 'private', None),
                    processor_affinity=_processor_affinity(process),
                    user_processor_time=timedelta(seconds=cpu_times.user),
                    privileged_processor_time=timedelta(seconds=cpu_times.system),
                    total_processor_time=timedelta(seconds=cpu_times.user + cpu_times.system),
                )
        except (psutil.Error, OSError) as e:
            raise RetrievalError('process information', e) from e

    def get_environment(self) -> SystemEnvironment:
        """
        Describe the host and the environment visible to this process.

        The environment is only read; os.environ is copied, never modified.

        Raises:
            RetrievalError: host or environment facts could not be read
        """
        try:
            machine = platform.machine()
            return SystemEnvironment(
                is_64bit_operating_system=Architecture.from_machine(machine) in _64BIT_ARCHITECTURES,
                is_64bit_process=sys.maxsize > 2 ** 32,
                is_privileged_process=_is_privileged(),
                machine_name=socket.gethostname(),
                os_version=platform.platform(),
                process_id=os.getpid(),
                processor_count=os.cpu_count() or 1,
                system_page_size=mmap.PAGESIZE,
                version=platform.python_version(),
                working_set=psutil.Process(os.getpid()).memory_info().rss,
                variables=dict(os.environ),
            )
        except (psutil.Error, OSError) as e:
            raise RetrievalError('environment', e) from e

    def get_version(self) -> str:
        """Application version string."""
        return hostinfo.__version__

    def shutdown_application(self):
        """Stop the hosting application."""
        logger.info("Stopping Application")
        self._stop_application()


_64BIT_ARCHITECTURES = {
    Architecture.X64,
    Architecture.ARM64,
    Architecture.S390X,
    Architecture.PPC64LE,
    Architecture.LOONGARCH64,
    Architecture.RISCV64,
}


def _process_architecture(machine, process_bits):
    host = Architecture.from_machine(machine)
    # 32-bit interpreter on a 64-bit host
    if process_bits == 32:
        if host is Architecture.X64:
            return Architecture.X86
        if host is Architecture.ARM64:
            return Architecture.ARM
    return host


def _handle_count(process):
    if hasattr(process, 'num_handles'):
        return process.num_handles()
    if hasattr(process, 'num_fds'):
        return process.num_fds()
    return None


def _peak_working_set(memory):
    # Windows reports the peak directly; elsewhere fall back to ru_maxrss
    peak = getattr(memory, 'peak_wset', None)
    if peak is not None:
        return peak
    try:
        import resource
    except ImportError:
        return None
    maxrss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is kilobytes on Linux and bytes on macOS
    return maxrss if sys.platform == 'darwin' else maxrss * 1024


def _processor_affinity(process):
    if not hasattr(process, 'cpu_affinity'):
        return []
    return list(process.cpu_affinity())


def _is_privileged():
    if hasattr(os, 'geteuid'):
        return os.geteuid() == 0
    import ctypes
    return bool(ctypes.windll.shell32.IsUserAnAdmin())
