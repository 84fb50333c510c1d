"""
Native package managers.

- SystemPackageManager: Abstract base class for native package managers
- PackageManagerDetector: Picks the manager available on the host
- AptManager, DnfManager, PacmanManager, BrewManager, ChocoManager

Example:
    from setupkit.core.platform import detect_platform
    from setupkit.packages import PackageManagerDetector, PackageSpec

    manager = PackageManagerDetector().detect(detect_platform())
    if manager and manager.has_package("ninja-build"):
        manager.install([PackageSpec("ninja-build")])
"""

from setupkit.packages.apt import AptManager
from setupkit.packages.base import (
    PackageManagerDetector,
    PackageSpec,
    SystemPackageManager,
)
from setupkit.packages.brew import BrewManager
from setupkit.packages.choco import ChocoManager
from setupkit.packages.dnf import DnfManager
from setupkit.packages.pacman import PacmanManager

__all__ = [
    "SystemPackageManager",
    "PackageManagerDetector",
    "PackageSpec",
    "AptManager",
    "BrewManager",
    "ChocoManager",
    "DnfManager",
    "PacmanManager",
]
