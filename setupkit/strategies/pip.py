"""
pip strategy for Python-hosted tools (meson, conan, gcovr, ...).

Applications go through pipx when it is available so they get an isolated
virtual environment; libraries and hosts without pipx use
``python -m pip install --user``. When the package index does not know the
package, or pip itself fails, the distribution's Python package
(python3-<name> / python-<name>) is installed with the native package manager
instead.
"""

import asyncio
import logging
import subprocess
import sys
import sysconfig
from pathlib import Path
from typing import Dict, List, Optional

from setupkit.core import process
from setupkit.core.exceptions import StrategyFailed, StrategyUnavailable
from setupkit.core.filesystem import find_executable
from setupkit.env.environment import Environment
from setupkit.packages.base import PackageSpec, SystemPackageManager
from setupkit.strategies.base import InstallRequest, InstallStrategy

logger = logging.getLogger(__name__)

# Distribution naming of Python packages
SYSTEM_PACKAGE_PREFIX: Dict[str, str] = {
    "apt": "python3-",
    "dnf": "python3-",
    "pacman": "python-",
}


def pipx_home() -> Path:
    """pipx home directory, preferring the legacy ~/.local/pipx if present."""
    legacy = Path.home() / ".local" / "pipx"
    if legacy.exists():
        return legacy
    if sys.platform == "win32":
        return Path.home() / "AppData" / "Local" / "pipx"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "pipx"
    return Path.home() / ".local" / "share" / "pipx"


def pipx_bin_dir() -> Path:
    return Path.home() / ".local" / "bin"


def user_scripts_dir() -> Path:
    """Where ``pip install --user`` puts console scripts."""
    scheme = sysconfig.get_preferred_scheme("user")
    return Path(sysconfig.get_path("scripts", scheme))


class PipStrategy(InstallStrategy):
    """
    Install a Python package with pipx or pip.

    Args:
        package: Name on the package index
        library: Install as an importable library (never through pipx)
        manager: Native package manager used as the fallback
        environment: Environment receiving PIPX_* variables and PATH entries
        python: Interpreter running pip
    """

    name = "pip"

    def __init__(
        self,
        package: str,
        library: bool = False,
        manager: Optional[SystemPackageManager] = None,
        environment: Optional[Environment] = None,
        python: Optional[str] = None,
    ):
        self.package = package
        self.library = library
        self.manager = manager
        self.environment = environment
        self.python = python or sys.executable

    async def install(self, request: InstallRequest) -> Path:
        return await asyncio.to_thread(self._install, request)

    def _install(self, request: InstallRequest) -> Path:
        use_pipx = self.uses_pipx()
        installer = "pipx" if use_pipx else "pip"

        if not self.index_has_package():
            logger.info(f"{self.package} was not found on the package index")
            return self._install_system(request, cause=None)

        requirement = f"{self.package}=={request.version}" if request.version else self.package
        logger.info(f"Installing {requirement} via {installer}")
        try:
            if use_pipx:
                self._pipx_install(requirement)
            else:
                process.run_command(
                    [self.python, "-m", "pip", "install", "--user", requirement]
                )
        except (process.ProcessError, OSError) as e:
            logger.info(f"Failed to install {self.package} via {installer}: {e}")
            return self._install_system(request, cause=e)

        return self.find_bin_dir(request.executable)

    # =========================================================================
    # pip / pipx
    # =========================================================================

    def uses_pipx(self) -> bool:
        if self.library:
            return False
        return self._succeeds([self.python, "-m", "pipx", "--version"])

    def index_has_package(self) -> bool:
        """Ask the package index whether it knows the package."""
        return self._succeeds(
            [self.python, "-m", "pip", "-qq", "index", "versions", self.package]
        )

    def _pipx_install(self, requirement: str) -> None:
        home = pipx_home()
        bin_dir = pipx_bin_dir()
        home.mkdir(parents=True, exist_ok=True)
        bin_dir.mkdir(parents=True, exist_ok=True)

        pipx_env = {"PIPX_HOME": str(home), "PIPX_BIN_DIR": str(bin_dir)}
        if self.environment is not None:
            for name, value in pipx_env.items():
                self.environment.set_env(name, value)
            self.environment.add_path(bin_dir)

        process.run_command([self.python, "-m", "pipx", "install", requirement], env=pipx_env)

    def _succeeds(self, command: List[str]) -> bool:
        try:
            return process.run_command(command, check=False, capture=True, timeout=120) == 0
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"{' '.join(command)} failed: {e}")
            return False

    def candidate_dirs(self) -> List[Path]:
        return [user_scripts_dir(), pipx_bin_dir()]

    def find_bin_dir(self, executable: str) -> Path:
        """
        Directory holding the installed script.

        The first candidate holding the executable, else the directory of the
        executable found on PATH, else the last candidate.
        """
        candidates = self.candidate_dirs()
        found = find_executable(executable, candidates)
        if found is not None:
            return found.parent
        on_path = process.which(executable)
        if on_path is not None:
            return Path(on_path).parent
        return candidates[-1]

    # =========================================================================
    # Native fallback
    # =========================================================================

    def system_package(self) -> Optional[str]:
        if self.manager is None:
            return None
        prefix = SYSTEM_PACKAGE_PREFIX.get(self.manager.name)
        if prefix is None:
            return None
        return f"{prefix}{self.package}"

    def _install_system(self, request: InstallRequest, cause: Optional[BaseException]) -> Path:
        name = self.system_package()
        if name is None or not self.manager.has_package(name):
            if cause is not None:
                raise StrategyFailed(self.name, cause) from cause
            raise StrategyUnavailable(
                f"{self.package} was found neither on the package index nor "
                "by the system package manager"
            )

        if request.version:
            logger.warning(f"{name} is installed in the distribution's version, not {request.version}")
        package = PackageSpec(name)
        self.manager.install([package])

        found = process.which(request.executable)
        if found is not None:
            return Path(found).parent
        return self.manager.bin_dir(package)

    def __repr__(self) -> str:
        return f"PipStrategy(package={self.package!r}, library={self.library})"