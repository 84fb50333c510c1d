"""
Native package manager strategy.

Tried first wherever a native package manager exists, because packaged tools
come with their shared library dependencies.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from setupkit.core.exceptions import StrategyUnavailable
from setupkit.packages.base import PackageSpec, SystemPackageManager
from setupkit.strategies.base import InstallRequest, InstallStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NativePackage:
    """
    How one native package manager ships a tool.

    Names and bin_dir may contain '{version}' and '{major}' placeholders,
    e.g. 'g++-{major}' or '/usr/lib/llvm-{major}/bin'.

    Attributes:
        names: Packages to install when a version is requested
        default_names: Packages to install when no version is requested;
            defaults to names when those carry no placeholder
        pin: Pass the requested version to the manager ('name=1.2.3')
        any_version: Install the repository's version whatever was requested
        bin_dir: Executable directory; the manager's default when empty
    """

    names: Tuple[str, ...]
    default_names: Tuple[str, ...] = ()
    pin: bool = False
    any_version: bool = False
    bin_dir: str = ""

    @property
    def templated(self) -> bool:
        return any("{" in name for name in self.names)

    def packages(self, version: str) -> List[PackageSpec]:
        """
        Packages to install for a concrete version.

        Raises:
            StrategyUnavailable: If the manager cannot provide the version
        """
        if not version:
            if self.default_names:
                return [PackageSpec(name) for name in self.default_names]
            if self.templated:
                raise StrategyUnavailable("a version is required for this package")
            return [PackageSpec(name) for name in self.names]

        if self.templated:
            return [PackageSpec(_expand(name, version)) for name in self.names]
        if self.pin:
            return [PackageSpec(name, version) for name in self.names]
        if self.any_version:
            logger.warning(
                f"{', '.join(self.names)}: the package manager installs its own "
                f"version, not {version}"
            )
            return [PackageSpec(name) for name in self.names]
        raise StrategyUnavailable(f"version {version} cannot be selected")

    def resolve_bin_dir(self, version: str) -> Optional[Path]:
        if not self.bin_dir or ("{" in self.bin_dir and not version):
            return None
        return Path(_expand(self.bin_dir, version))


def _expand(template: str, version: str) -> str:
    return template.format(version=version, major=version.split(".")[0])


class SystemStrategy(InstallStrategy):
    """
    Install with the host's native package manager.

    Args:
        packages: Manager name ('apt', 'brew', ...) -> NativePackage
        manager: The detected manager, None when the host has none
    """

    name = "system"

    def __init__(
        self,
        packages: Mapping[str, NativePackage],
        manager: Optional[SystemPackageManager],
    ):
        self.packages = dict(packages)
        self.manager = manager

    async def install(self, request: InstallRequest) -> Path:
        manager = self.manager
        if manager is None:
            raise StrategyUnavailable("no native package manager found")

        native = self.packages.get(manager.name)
        if native is None:
            raise StrategyUnavailable(f"{request.tool} is not packaged for {manager.name}")

        packages = native.packages(request.version)
        # a fresh host may have an empty index until the first refresh
        await asyncio.to_thread(manager.update)
        for package in packages:
            if not await asyncio.to_thread(manager.has_package, package.name):
                raise StrategyUnavailable(f"{manager.name} has no package {package.name}")

        await asyncio.to_thread(manager.install, packages)

        bin_dir = native.resolve_bin_dir(request.version)
        if bin_dir is None:
            bin_dir = await asyncio.to_thread(manager.bin_dir, packages[0])
        return bin_dir

    def __repr__(self) -> str:
        return f"SystemStrategy(manager={self.manager!r})"
