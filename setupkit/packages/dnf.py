"""dnf (Fedora, RHEL and derivatives)."""

from typing import List, Sequence

from setupkit.packages.base import PackageSpec, SystemPackageManager


class DnfManager(SystemPackageManager):
    """Installs packages with dnf."""

    name = "dnf"
    executable = "dnf"

    def has_package(self, name: str) -> bool:
        return self.query(["dnf", "info", "-q", name])

    def install_command(self, packages: Sequence[PackageSpec]) -> List[str]:
        names = [f"{p.name}-{p.version}" if p.version else p.name for p in packages]
        return ["dnf", "-y", "install", *names]
