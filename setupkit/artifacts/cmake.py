"""
CMake release locator.

Downloads pre-built CMake binaries from GitHub releases. Release archive
names changed in 3.20 (lower-case platform names, universal macOS builds),
so URL construction switches on that threshold.
"""

import functools
from typing import Iterable, Optional

from setupkit.artifacts.base import ArtifactDescriptor, ArtifactLocator, version_lte
from setupkit.core.filesystem import extract_archive

RELEASES = (
    "3.16.9",
    "3.17.5",
    "3.18.6",
    "3.19.8",
    "3.20.0",
    "3.20.1",
    "3.20.2",
    "3.20.5",
    "3.20.6",
    "3.21.7",
    "3.22.6",
    "3.23.5",
    "3.24.4",
    "3.25.3",
    "3.26.6",
    "3.27.9",
    "3.28.1",
    "3.28.6",
    "3.29.6",
    "3.30.5",
)

# Last release using the old archive naming scheme
LEGACY_NAMING_MAX = "3.19.8"


def platform_suffix(platform: str, version: str, arch: str) -> Optional[str]:
    """
    Platform part of the archive name, e.g. 'linux-x86_64'.

    Returns None for unsupported platform/arch combinations.
    """
    legacy = version_lte(version, LEGACY_NAMING_MAX)

    if platform == "linux":
        machine = {"x64": "x86_64", "arm64": "aarch64"}.get(arch)
        if machine is None:
            return None
        return f"Linux-{machine}" if legacy else f"linux-{machine}"
    if platform == "darwin":
        return "Darwin-x86_64" if legacy else "macos-universal"
    if platform == "win32":
        if legacy:
            return {"x64": "win64-x64", "x86": "win32-x86"}.get(arch)
        return {"x64": "windows-x86_64", "x86": "windows-i386", "arm64": "windows-arm64"}.get(arch)
    return None


class CMakeLocator(ArtifactLocator):
    """Locates CMake release archives."""

    tool = "cmake"
    allow_unlisted = True

    def specific_releases(self) -> Iterable[str]:
        return RELEASES

    async def artifact_url(
        self, platform: str, version: str, arch: str
    ) -> Optional[str]:
        suffix = platform_suffix(platform, version, arch)
        if suffix is None:
            return None
        ext = "zip" if platform == "win32" else "tar.gz"
        return (
            f"https://github.com/Kitware/CMake/releases/download/v{version}/"
            f"cmake-{version}-{suffix}.{ext}"
        )

    def descriptor(
        self, platform: str, version: str, url: str, arch: str
    ) -> ArtifactDescriptor:
        # cmake-3.28.1-macos-universal/CMake.app/Contents/bin/cmake
        bin_dir = "CMake.app/Contents/bin" if platform == "darwin" else "bin"
        return ArtifactDescriptor(
            tool=self.tool,
            version=version,
            url=url,
            extracted_folder_name=f"cmake-{version}-{platform_suffix(platform, version, arch)}",
            bin_relative_dir=bin_dir,
            extract=functools.partial(extract_archive, strip_components=0),
        )
