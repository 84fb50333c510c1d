"""
Tool installation.

Installer is the entry point for installing tools:

    installer = Installer(DefaultVersionTable.load())
    info = await installer.ensure_installed("gcc")          # default version
    info = await installer.ensure_installed("llvm", "12")
    await installer.activate(info)

ensure_installed() resolves the requested version, then tries the tool's
installation strategies in order. Results are memoized per
(tool, concrete version, arch): repeated and concurrent requests for the same
key share one installation attempt and its result, success or failure.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from setupkit.artifacts.base import UrlProbe
from setupkit.config.defaults import DefaultVersionTable
from setupkit.core.memoize import IdempotencyCache
from setupkit.core.platform import PlatformInfo, detect_platform
from setupkit.env.activator import EnvironmentActivator
from setupkit.env.environment import Environment
from setupkit.packages.base import PackageManagerDetector, SystemPackageManager
from setupkit.packages.brew import BrewManager
from setupkit.strategies.archive import ArchiveStrategy, Downloader
from setupkit.strategies.base import InstallRequest, InstallStrategy, select_strategy
from setupkit.strategies.pip import PipStrategy
from setupkit.strategies.system import SystemStrategy
from setupkit.tools import registry
from setupkit.tools.brew import BOOTSTRAP_ERRORS, setup_brew
from setupkit.tools.registry import ToolSpec
from setupkit.versions.resolver import VersionRequest, VersionResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallationInfo:
    """
    A completed installation.

    Attributes:
        tool: Canonical tool name
        version: Concrete version that was requested ("" for the default)
        arch: Target architecture
        bin_dir: Directory holding the tool's executables
        strategy: Name of the strategy that installed it
    """

    tool: str
    version: str
    arch: str
    bin_dir: Path
    strategy: str = ""


class Installer:
    """
    Installs and activates tools.

    Args:
        table: Default versions
        platform: Host platform; detected when omitted
        environment: Environment receiving activation effects
        setup_dir: Root for archive installations
        detector: Native package manager detection
        url_exists: Existence probe handed to the artifact locators
        download: Downloader handed to the archive strategy
    """

    def __init__(
        self,
        table: DefaultVersionTable,
        platform: Optional[PlatformInfo] = None,
        environment: Optional[Environment] = None,
        setup_dir: Optional[Path] = None,
        detector: Optional[PackageManagerDetector] = None,
        url_exists: Optional[UrlProbe] = None,
        download: Optional[Downloader] = None,
    ):
        self.resolver = VersionResolver(table)
        self.table = table
        self.platform = platform or detect_platform()
        self.environment = environment or Environment()
        self.setup_dir = setup_dir
        self.detector = detector or PackageManagerDetector()
        self.url_exists = url_exists
        self.download = download
        self.activator = EnvironmentActivator(self.environment, self.platform)

        self._installations: IdempotencyCache[InstallationInfo] = IdempotencyCache("installations")
        self._activations: IdempotencyCache[bool] = IdempotencyCache("activations")
        self._managers: IdempotencyCache[Optional[SystemPackageManager]] = IdempotencyCache(
            "package-manager"
        )

    # =========================================================================
    # Versions
    # =========================================================================

    def resolve_version(self, tool: str, version: Optional[str]) -> str:
        """
        Concrete version for a request.

        Aliases with their own default ('clangtidy') use it; other aliases
        use the default of the tool providing them.
        """
        name = tool if tool in self.table else registry.canonical_name(tool)
        request = VersionRequest(
            tool_name=name,
            requested_version=version,
            platform=self.platform.os,
            os_release=self.platform.ubuntu_version(),
        )
        return self.resolver.resolve(request)

    # =========================================================================
    # Installation
    # =========================================================================

    async def ensure_installed(
        self, tool: str, version: Optional[str] = None, arch: Optional[str] = None
    ) -> InstallationInfo:
        """
        Install a tool unless this process already did.

        Args:
            tool: Tool name or alias
            version: Version request; None, 'true' or 'default' for the default
            arch: Target architecture; the host's when omitted

        Returns:
            InstallationInfo with the tool's bin directory

        Raises:
            ConfigurationError: If the tool is unknown
            AllStrategiesExhausted: If no strategy could install the tool
        """
        spec = registry.get_tool(tool)
        concrete = self.resolve_version(tool, version)
        arch = arch or self.platform.arch
        key = (spec.name, concrete, arch)
        return await self._installations.memoize(key, lambda: self._install(spec, concrete, arch))

    async def _install(self, spec: ToolSpec, version: str, arch: str) -> InstallationInfo:
        request = InstallRequest(
            tool=spec.name,
            version=version,
            arch=arch,
            platform=self.platform,
            executable=spec.executable,
        )
        logger.info(f"Installing {request.describe()}")
        strategies = await self.strategies_for(spec)
        outcome = await select_strategy(strategies, request)
        logger.info(f"Installed {request.describe()} with {outcome.strategy} in {outcome.bin_dir}")
        return InstallationInfo(spec.name, version, arch, outcome.bin_dir, outcome.strategy)

    async def strategies_for(self, spec: ToolSpec) -> List[InstallStrategy]:
        """Strategy chain for a tool, in priority order."""
        builders = {
            registry.SYSTEM: self._system_strategy,
            registry.ARCHIVE: self._archive_strategy,
            registry.PIP: self._pip_strategy,
        }
        strategies = []
        for name in spec.strategies:
            strategy = await builders[name](spec)
            if strategy is not None:
                strategies.append(strategy)
        return strategies

    async def _system_strategy(self, spec: ToolSpec) -> Optional[InstallStrategy]:
        if not spec.native:
            return None
        return SystemStrategy(spec.native, await self.package_manager())

    async def _archive_strategy(self, spec: ToolSpec) -> Optional[InstallStrategy]:
        if spec.locator is None:
            return None
        return ArchiveStrategy(spec.locator(self.url_exists), self.setup_dir, self.download)

    async def _pip_strategy(self, spec: ToolSpec) -> Optional[InstallStrategy]:
        if not spec.pip_package:
            return None
        return PipStrategy(
            spec.pip_package,
            library=spec.library,
            manager=await self.package_manager(),
            environment=self.environment,
        )

    async def package_manager(self) -> Optional[SystemPackageManager]:
        """The native package manager, bootstrapping Homebrew on macOS."""
        return await self._managers.memoize("native", self._detect_package_manager)

    async def _detect_package_manager(self) -> Optional[SystemPackageManager]:
        manager = await asyncio.to_thread(self.detector.detect, self.platform)
        if manager is None and self.platform.os == "darwin":
            try:
                brew_dir = await setup_brew(self.environment, self.platform)
            except BOOTSTRAP_ERRORS as e:
                logger.warning(f"Homebrew could not be installed: {e}")
                return None
            if brew_dir is not None:
                manager = BrewManager(str(brew_dir / "brew"))
        return manager

    def installations(self) -> List[InstallationInfo]:
        """Installations that completed successfully so far."""
        return [info for _, info in self._installations.completed()]

    # =========================================================================
    # Activation
    # =========================================================================

    async def activate(self, info: InstallationInfo) -> bool:
        """
        Apply an installation's environment effects once per process.

        Returns:
            True if every activation step succeeded
        """
        key = (info.tool, str(info.bin_dir))
        return await self._activations.memoize(
            key,
            lambda: asyncio.to_thread(
                self.activator.activate, info.tool, info.bin_dir, info.version
            ),
        )
