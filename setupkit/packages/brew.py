"""Homebrew (macOS, optionally Linux)."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from setupkit.core import process
from setupkit.packages.base import PackageSpec, SystemPackageManager

logger = logging.getLogger(__name__)


class BrewManager(SystemPackageManager):
    """
    Installs formulae with brew.

    Homebrew has no version pinning; versioned formulae carry the version in
    their name ('gcc@11', 'llvm@12').

    Args:
        brew: Path to the brew executable; found on PATH when omitted
    """

    name = "brew"
    executable = "brew"
    needs_root = False

    def __init__(self, brew: Optional[str] = None):
        super().__init__()
        self.brew = brew or self.executable

    def is_available(self) -> bool:
        if self.brew != self.executable:
            return Path(self.brew).exists()
        return super().is_available()

    def has_package(self, name: str) -> bool:
        return self.query([self.brew, "info", name])

    def install_env(self) -> Optional[Dict[str, str]]:
        return {"HOMEBREW_NO_AUTO_UPDATE": "1", "HOMEBREW_NO_INSTALL_CLEANUP": "1"}

    def install_command(self, packages: Sequence[PackageSpec]) -> List[str]:
        return [self.brew, "install", *[p.name for p in packages]]

    def bin_dir(self, package: PackageSpec) -> Path:
        """'brew --prefix <formula>'/bin, so keg-only formulae are found too."""
        try:
            prefix = process.command_output([self.brew, "--prefix", package.name])
        except (process.ProcessError, OSError) as e:
            logger.debug(f"brew --prefix {package.name} failed: {e}")
            return Path(self.brew).parent
        return Path(prefix) / "bin"
