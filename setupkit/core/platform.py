"""
Platform detection for SetupKit.

This module detects the host the tools are being provisioned on. The
installation strategies use it to pick a native package manager, and the
version resolver uses the OS release to choose release-scoped defaults.

Usage:
    from setupkit.core.platform import detect_platform

    platform_info = detect_platform()
    print(f"OS: {platform_info.os}")
    print(f"Architecture: {platform_info.arch}")
    if platform_info.is_debian_family():
        print("apt is the native package manager")
"""

import functools
import logging
import platform
import sys
from dataclasses import dataclass
from typing import Optional, Tuple

import distro

logger = logging.getLogger(__name__)

SUPPORTED_OS = ("linux", "darwin", "win32")

# distro.id() / distro.like() values grouped by the package tool they ship
_FAMILIES = {
    "debian": ("debian", "ubuntu", "linuxmint", "pop", "elementary", "raspbian"),
    "fedora": ("fedora", "rhel", "centos", "rocky", "almalinux", "amzn"),
    "arch": ("arch", "manjaro", "endeavouros"),
}


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host platform information.

    Attributes:
        os: Operating system ('linux', 'darwin', 'win32')
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm')
        os_version: OS version string (e.g. '22.04', '14.1', '10.0.19041')
        distribution: Linux distribution id ('ubuntu', 'fedora', ...) or empty
        distribution_family: 'debian', 'fedora', 'arch' or empty
        os_release: Numeric release components (e.g. (22, 4)) or None
    """

    os: str
    arch: str
    os_version: str = ""
    distribution: str = ""
    distribution_family: str = ""
    os_release: Optional[Tuple[int, ...]] = None

    def platform_string(self) -> str:
        """Canonical platform string, e.g. 'linux-x64'."""
        return f"{self.os}-{self.arch}"

    def is_debian_family(self) -> bool:
        return self.os == "linux" and self.distribution_family == "debian"

    def is_fedora_family(self) -> bool:
        return self.os == "linux" and self.distribution_family == "fedora"

    def is_arch_family(self) -> bool:
        return self.os == "linux" and self.distribution_family == "arch"

    def ubuntu_version(self) -> Optional[Tuple[int, ...]]:
        """
        Release numbers when running on Ubuntu.

        The release-scoped default tables are keyed by Ubuntu major version,
        so other distributions return None.
        """
        if self.os == "linux" and self.distribution == "ubuntu":
            return self.os_release
        return None

    def __str__(self) -> str:
        parts = [self.platform_string()]
        if self.distribution:
            parts.append(f"({self.distribution})")
        if self.os_version:
            parts.append(f"v{self.os_version}")
        return " ".join(parts)


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Returns:
        PlatformInfo instance with detected platform information
    """
    os_name = _detect_os()
    arch = _detect_architecture()

    if os_name == "linux":
        distribution = distro.id()
        info = PlatformInfo(
            os=os_name,
            arch=arch,
            os_version=distro.version(),
            distribution=distribution,
            distribution_family=_detect_family(distribution, distro.like()),
            os_release=_parse_release(distro.version_parts()),
        )
    elif os_name == "darwin":
        version = platform.mac_ver()[0]
        info = PlatformInfo(
            os=os_name,
            arch=arch,
            os_version=version,
            os_release=_parse_release(tuple(version.split("."))),
        )
    else:
        info = PlatformInfo(os=os_name, arch=arch, os_version=platform.version())

    logger.debug(f"Detected platform: {info}")
    return info


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        'linux', 'darwin' or 'win32'

    Raises:
        RuntimeError: If OS is not supported
    """
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform in ("win32", "cygwin"):
        return "win32"
    raise RuntimeError(f"Unsupported operating system: {sys.platform}")


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm'
    """
    return normalize_arch(platform.machine())


def normalize_arch(machine: str) -> str:
    """Normalize an architecture name ('x86_64', 'aarch64', 'ia32', ...)."""
    machine = machine.lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86", "ia32"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    else:
        return machine


def _detect_family(distribution: str, like: str) -> str:
    ids = [distribution] + like.split()
    for family, members in _FAMILIES.items():
        if any(i in members for i in ids):
            return family
    return ""


def _parse_release(parts) -> Optional[Tuple[int, ...]]:
    numbers = []
    for part in parts:
        if not part or not part.isdigit():
            break
        numbers.append(int(part))
    return tuple(numbers) or None


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "SUPPORTED_OS",
    "detect_platform",
    "normalize_arch",
    "clear_platform_cache",
]
