"""
Strata runtime diagnostics (the sections shown under help/version).

collect() returns a fresh, read-only snapshot on every call:

    PLATFORM  Host: <hostname> | OS: <system> | Arch: <machine>
    RUNTIME   Version: <implementation> <version> | CPUs: <count>
    MEM       Resident: <rss> | Virtual: <vms> | Host-Total: <total> | Host-Available: <available>

The keys are always present and always in that order. A failing probe never
aborts the snapshot: an unresolvable host name renders as an empty host and an
unreadable memory counter renders MEM as an empty string.
"""
import logging
import os
import platform
import socket
from types import MappingProxyType

import psutil
from rich.filesize import decimal

logger = logging.getLogger(__name__)

KEYS = ("PLATFORM", "RUNTIME", "MEM")


def _hostname(resolve, /):
    try:
        return resolve()
    except OSError as exception:
        logger.debug("host name lookup failed: %s", exception)
        return ""


def _memory(process, /):
    try:
        usage = (process or psutil.Process()).memory_info()
        host = psutil.virtual_memory()
    except (psutil.Error, OSError) as exception:
        logger.debug("memory probe failed: %s", exception)
        return ""
    return "Resident: %s | Virtual: %s | Host-Total: %s | Host-Available: %s" % (
        decimal(usage.rss),
        decimal(usage.vms),
        decimal(host.total),
        decimal(host.available),
    )


def collect(*, hostname=socket.gethostname, process=None):
    """
    Gather process/host/runtime metrics into a {PLATFORM, RUNTIME, MEM} snapshot.

    Parameters
    - hostname: zero-argument callable returning the host name (may raise OSError).
    - process: psutil.Process to inspect; defaults to the current process.

    Returns
    - MappingProxyType[str, str], recomputed on every call (never cached).
    """
    snapshot = {
        "PLATFORM": "Host: %s | OS: %s | Arch: %s" % (
            _hostname(hostname), platform.system(), platform.machine()
        ),
        "RUNTIME": "Version: %s %s | CPUs: %s" % (
            platform.python_implementation(), platform.python_version(), os.cpu_count() or 1
        ),
        "MEM": _memory(process),
    }
    return MappingProxyType(snapshot)


__all__ = (
    "KEYS",
    "collect",
)
