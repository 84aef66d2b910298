"""
Platform identification.

Maps the raw OS name and CPU architecture reported for the running
interpreter onto the closed set of platforms that ship prebuilt binaries.
"""

from __future__ import annotations

import logging
import platform as _host
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import UnsupportedPlatform

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────
# Closed platform set
# ────────────────────────────────────────────────────────

class OperatingSystem(Enum):
    """Supported operating systems with their library directory token and extension."""

    OSX = ("osx", "dylib", ("Darwin", "Mac"))
    LINUX = ("linux", "so", ("Linux",))
    WINDOWS = ("windows", "dll", ("Windows",))

    def __init__(self, token: str, library_extension: str, prefixes: Tuple[str, ...]) -> None:
        self.token = token
        self.library_extension = library_extension
        self.prefixes = prefixes

    @classmethod
    def identify(cls, os_name: str) -> "OperatingSystem":
        """Prefix match, so version-qualified names like ``Windows 11`` are accepted."""
        for candidate in cls:
            if any(os_name.startswith(prefix) for prefix in candidate.prefixes):
                return candidate
        raise UnsupportedPlatform(f"Unsupported operating system: {os_name}", os_name)


class CPUArchitecture(Enum):
    """Supported CPU architectures with their library directory token."""

    X86 = ("x86", ("i386", "i686"))
    AMD64 = ("amd64", ("amd64", "x86_64"))
    AARCH64 = ("aarch64", ("aarch64",))

    def __init__(self, token: str, aliases: Tuple[str, ...]) -> None:
        self.token = token
        self.aliases = aliases

    @classmethod
    def identify(cls, arch: str) -> "CPUArchitecture":
        for candidate in cls:
            if arch in candidate.aliases:
                return candidate
        raise UnsupportedPlatform(f"Unsupported CPU architecture: {arch}", arch)


@dataclass(frozen=True)
class Platform:
    """A supported (operating system, CPU architecture) pair."""

    os: OperatingSystem
    arch: CPUArchitecture

    @property
    def library_extension(self) -> str:
        return self.os.library_extension

    @property
    def directory(self) -> str:
        """Resource directory name, e.g. ``linux-amd64``."""
        return f"{self.os.token}-{self.arch.token}"

    def __str__(self) -> str:
        return f"{self.os.name} on {self.arch.name}"


SUPPORTED_PLATFORMS: List[Platform] = [
    Platform(os_, arch) for os_ in OperatingSystem for arch in CPUArchitecture
]


# ────────────────────────────────────────────────────────
# Environment inspection
# ────────────────────────────────────────────────────────

# Spellings the Python runtime uses where other runtimes report the
# canonical token (macOS and Windows on ARM report "arm64", 32-bit Windows "x86").
_MACHINE_ALIASES: Dict[str, str] = {
    "arm64": "aarch64",
    "x86": "i686",
}


def host_environment() -> Tuple[str, str]:
    """
    Return the raw (os_name, architecture) strings for this interpreter.

    The architecture is that of the running process, not the CPU: a 32-bit
    interpreter on a 64-bit machine can only link 32-bit libraries.
    """
    os_name = _host.system()
    machine = _host.machine().lower()
    machine = _MACHINE_ALIASES.get(machine, machine)
    if machine in ("amd64", "x86_64") and struct.calcsize("P") == 4:
        machine = "i686"
    return os_name, machine


def identify(os_name: Optional[str] = None, arch: Optional[str] = None) -> Platform:
    """
    Identify the platform for the given raw strings.

    Missing values are taken from :func:`host_environment`. Raises
    :class:`UnsupportedPlatform` if either string is unrecognised.
    """
    if os_name is None or arch is None:
        host_os, host_arch = host_environment()
        os_name = host_os if os_name is None else os_name
        arch = host_arch if arch is None else arch

    result = Platform(OperatingSystem.identify(os_name), CPUArchitecture.identify(arch))
    logger.debug("Identified platform %s from os=%r arch=%r", result.directory, os_name, arch)
    return result
