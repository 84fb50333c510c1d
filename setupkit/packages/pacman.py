"""pacman (Arch Linux and derivatives)."""

from typing import List, Optional, Sequence

from setupkit.packages.base import PackageSpec, SystemPackageManager


class PacmanManager(SystemPackageManager):
    """
    Installs packages with pacman.

    pacman cannot install an arbitrary older version from the repositories,
    so pinned versions are passed as 'name=version' and pacman rejects them
    if the repository carries another one.
    """

    name = "pacman"
    executable = "pacman"

    def has_package(self, name: str) -> bool:
        return self.query(["pacman", "-Si", name])

    def update_command(self) -> Optional[List[str]]:
        return ["pacman", "-Sy", "--noconfirm"]

    def install_command(self, packages: Sequence[PackageSpec]) -> List[str]:
        names = [f"{p.name}={p.version}" if p.version else p.name for p in packages]
        return ["pacman", "-S", "--noconfirm", "--needed", *names]
