"""Chocolatey (Windows)."""

from pathlib import Path
from typing import List, Sequence

from setupkit.core.exceptions import PackageManagerInstallError
from setupkit.packages.base import PackageSpec, SystemPackageManager

CHOCO_BIN = Path("C:/ProgramData/chocolatey/bin")


class ChocoManager(SystemPackageManager):
    """Installs packages with choco. Must run from an elevated shell."""

    name = "choco"
    executable = "choco"
    needs_root = False
    default_bin_dir = CHOCO_BIN

    def has_package(self, name: str) -> bool:
        return self.query(["choco", "search", name, "--exact", "--limit-output"])

    def install_command(self, packages: Sequence[PackageSpec]) -> List[str]:
        command = ["choco", "install", "-y", "--no-progress"]
        pinned = [p for p in packages if p.version]
        if len(pinned) > 1:
            raise PackageManagerInstallError(
                "choco can pin only one package version per install"
            )
        command += [p.name for p in packages]
        if pinned:
            command += ["--version", pinned[0].version]
        return command
