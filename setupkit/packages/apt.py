"""apt (Debian, Ubuntu and derivatives)."""

from typing import Dict, List, Optional, Sequence

from setupkit.packages.base import PackageSpec, SystemPackageManager


class AptManager(SystemPackageManager):
    """Installs packages with apt-get."""

    name = "apt"
    executable = "apt-get"

    def has_package(self, name: str) -> bool:
        return self.query(["apt-cache", "show", name])

    def update_command(self) -> Optional[List[str]]:
        return ["apt-get", "update", "-q"]

    def install_env(self) -> Optional[Dict[str, str]]:
        return {"DEBIAN_FRONTEND": "noninteractive"}

    def install_command(self, packages: Sequence[PackageSpec]) -> List[str]:
        names = [f"{p.name}={p.version}" if p.version else p.name for p in packages]
        return ["apt-get", "install", "-y", "-q", "--fix-broken", *names]
