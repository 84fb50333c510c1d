"""
Native package manager abstraction for SetupKit.

This module provides the abstract base class for the operating system's
package managers (apt, dnf, pacman, Homebrew, Chocolatey) and the detector
that picks the one available on the host.

Classes:
    PackageSpec: A package name with an optional pinned version
    SystemPackageManager: Abstract base class for native package managers
    PackageManagerDetector: Detect the native package manager of a host

Exceptions:
    PackageManagerNotFoundError: Package manager not found
    PackageManagerInstallError: Error during package installation
"""

import logging
import subprocess
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from setupkit.core import process
from setupkit.core.exceptions import (
    PackageManagerInstallError,
    PackageManagerNotFoundError,
)
from setupkit.core.platform import PlatformInfo

logger = logging.getLogger(__name__)


# =============================================================================
# Package Specification
# =============================================================================


@dataclass(frozen=True)
class PackageSpec:
    """
    A package to install.

    Attributes:
        name: Package name as known to the manager (e.g. 'g++-11')
        version: Version to pin, or "" for the repository's version
    """

    name: str
    version: str = ""

    def __post_init__(self):
        if not self.name:
            raise ValueError("Package name cannot be empty")

    def __str__(self) -> str:
        return f"{self.name} {self.version}" if self.version else self.name


# =============================================================================
# Abstract Package Manager
# =============================================================================


class SystemPackageManager(ABC):
    """
    Abstract base class for native package managers.

    Subclasses set name/executable and implement has_package(),
    install_command() and, when the repository index must be refreshed before
    installing, update_command().

    Attributes:
        name: Manager name ('apt', 'dnf', ...)
        executable: Program probed on PATH to decide availability
        needs_root: Whether installs must run elevated
        default_bin_dir: Where packaged executables land
    """

    name: str = ""
    executable: str = ""
    needs_root: bool = True
    default_bin_dir: Path = Path("/usr/bin")

    def __init__(self):
        self._updated = False
        self._update_lock = threading.Lock()

    def is_available(self) -> bool:
        """Check whether the manager's executable is on PATH."""
        return process.which(self.executable) is not None

    @abstractmethod
    def has_package(self, name: str) -> bool:
        """Check whether the repositories offer a package."""

    @abstractmethod
    def install_command(self, packages: Sequence[PackageSpec]) -> List[str]:
        """Command installing the given packages non-interactively."""

    def update_command(self) -> Optional[List[str]]:
        """Command refreshing the repository index, or None if not needed."""
        return None

    def install_env(self) -> Optional[Dict[str, str]]:
        return None

    def bin_dir(self, package: PackageSpec) -> Path:
        """Directory holding the executables of an installed package."""
        return self.default_bin_dir

    def update(self) -> None:
        """Refresh the repository index once per manager instance."""
        command = self.update_command()
        if command is None:
            return
        with self._update_lock:
            if self._updated:
                return
            logger.info(f"Updating {self.name} package index")
            self._run(command)
            self._updated = True

    def install(self, packages: Sequence[PackageSpec]) -> None:
        """
        Install packages.

        Args:
            packages: Packages to install together

        Raises:
            PackageManagerNotFoundError: If the manager is not on PATH
            PackageManagerInstallError: If the manager reported a failure
        """
        if not self.is_available():
            raise PackageManagerNotFoundError(f"{self.name} is not installed")
        if not packages:
            return

        self.update()
        logger.info(f"Installing {', '.join(str(p) for p in packages)} with {self.name}")
        self._run(self.install_command(packages))

    def _run(self, command: Sequence[str]) -> None:
        try:
            if self.needs_root:
                process.run_elevated(command, env=self.install_env())
            else:
                process.run_command(command, env=self.install_env())
        except (process.ProcessError, OSError) as e:
            raise PackageManagerInstallError(f"{self.name} failed: {e}") from e

    def query(self, command: Sequence[str]) -> bool:
        """Run a read-only query command and report whether it succeeded."""
        try:
            return process.run_command(command, check=False, capture=True, timeout=120) == 0
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"{self.name} query failed: {e}")
            return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


# =============================================================================
# Detection
# =============================================================================


class PackageManagerDetector:
    """
    Detect the native package manager of a host.

    Candidates are tried in order; the first whose executable is on PATH
    wins.

    Example:
        detector = PackageManagerDetector()
        manager = detector.detect(detect_platform())
        if manager:
            manager.install([PackageSpec("ninja-build")])
    """

    def __init__(self, managers: Optional[Sequence[SystemPackageManager]] = None):
        self._managers = managers

    def candidates(self, platform: PlatformInfo) -> List[SystemPackageManager]:
        if self._managers is not None:
            return list(self._managers)

        from setupkit.packages.apt import AptManager
        from setupkit.packages.brew import BrewManager
        from setupkit.packages.choco import ChocoManager
        from setupkit.packages.dnf import DnfManager
        from setupkit.packages.pacman import PacmanManager

        if platform.os == "win32":
            return [ChocoManager()]
        if platform.os == "darwin":
            return [BrewManager()]

        ordered = {
            "debian": [AptManager(), DnfManager(), PacmanManager()],
            "fedora": [DnfManager(), AptManager(), PacmanManager()],
            "arch": [PacmanManager(), AptManager(), DnfManager()],
        }
        return ordered.get(
            platform.distribution_family,
            [AptManager(), DnfManager(), PacmanManager()],
        )

    def detect(self, platform: PlatformInfo) -> Optional[SystemPackageManager]:
        """
        Return the first available manager, or None.

        Homebrew on Linux is never picked here; it is only used for tools that
        explicitly ask for it.
        """
        for manager in self.candidates(platform):
            if manager.is_available():
                logger.debug(f"Detected native package manager: {manager.name}")
                return manager
        logger.debug(f"No native package manager found on {platform}")
        return None
