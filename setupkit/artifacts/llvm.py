"""
LLVM release locator.

Prebuilt LLVM archives have been published under two hosts: releases up to
9.0.1 live on releases.llvm.org, later ones on GitHub release pages. Platform
coverage is irregular, so the gaps are spelled out as explicit tables:

- DARWIN_MISSING / WIN32_MISSING: versions never published for the platform
- UBUNTU: the Ubuntu release each Linux archive was built on (filename suffix)
- UBUNTU_RC: versions whose only Linux build is a release candidate

Example:
    >>> locator = LLVMLocator()
    >>> version, url = asyncio.run(locator.locate("darwin", "9"))
    >>> version
    '9.0.1'
"""

import functools
import logging
from typing import Dict, Iterable, Optional

from setupkit.artifacts.base import (
    ArtifactDescriptor,
    ArtifactLocator,
    version_lte,
)
from setupkit.core.filesystem import extract_archive

logger = logging.getLogger(__name__)

RELEASES = (
    "3.5.0",
    "3.5.1",
    "3.5.2",
    "3.6.0",
    "3.6.1",
    "3.6.2",
    "3.7.0",
    "3.7.1",
    "3.8.0",
    "3.8.1",
    "3.9.0",
    "3.9.1",
    "4.0.0",
    "4.0.1",
    "5.0.0",
    "5.0.1",
    "5.0.2",
    "6.0.0",
    "6.0.1",
    "7.0.0",
    "7.0.1",
    "7.1.0",
    "8.0.0",
    "8.0.1",
    "9.0.0",
    "9.0.1",
    "10.0.0",
    "10.0.1",
    "11.0.0",
    "11.0.1",
    "11.1.0",
    "12.0.0",
    "12.0.1",
)

# Last version hosted on releases.llvm.org
RELEASES_HOST_MAX = "9.0.1"

DARWIN_MISSING = frozenset(
    {
        "3.5.1",
        "3.6.1",
        "3.6.2",
        "3.7.1",
        "3.8.1",
        "3.9.1",
        "6.0.1",
        "7.0.1",
        "7.1.0",
        "8.0.1",
        "11.0.1",
        "11.1.0",
        "12.0.1",
    }
)

WIN32_MISSING = frozenset({"10.0.1"})

# Installers up to this version are 32-bit
WIN32_ONLY_MAX = "3.7.0"

UBUNTU_RC: Dict[str, str] = {"12.0.1": "12.0.1-rc4"}

UBUNTU: Dict[str, str] = {
    "3.5.0": "-ubuntu-14.04",
    "3.5.1": "",
    "3.5.2": "-ubuntu-14.04",
    "3.6.0": "-ubuntu-14.04",
    "3.6.1": "-ubuntu-14.04",
    "3.6.2": "-ubuntu-14.04",
    "3.7.0": "-ubuntu-14.04",
    "3.7.1": "-ubuntu-14.04",
    "3.8.0": "-ubuntu-16.04",
    "3.8.1": "-ubuntu-16.04",
    "3.9.0": "-ubuntu-16.04",
    "3.9.1": "-ubuntu-16.04",
    "4.0.0": "-ubuntu-16.04",
    "5.0.0": "-ubuntu16.04",
    "5.0.1": "-ubuntu-16.04",
    "5.0.2": "-ubuntu-16.04",
    "6.0.0": "-ubuntu-16.04",
    "6.0.1": "-ubuntu-16.04",
    "7.0.0": "-ubuntu-16.04",
    "7.0.1": "-ubuntu-18.04",
    "7.1.0": "-ubuntu-14.04",
    "8.0.0": "-ubuntu-18.04",
    "9.0.0": "-ubuntu-18.04",
    "9.0.1": "-ubuntu-16.04",
    "10.0.0": "-ubuntu-18.04",
    "10.0.1": "-ubuntu-16.04",
    "11.0.0": "-ubuntu-20.04",
    "11.0.1": "-ubuntu-16.04",
    "11.1.0": "-ubuntu-16.04",
    "12.0.0": "-ubuntu-20.04",
    "12.0.1-rc4": "-ubuntu-21.04",
}

# Used for versions without an UBUNTU entry
MAX_UBUNTU = "12.0.1-rc4"


def github_url(version: str, prefix: str, suffix: str) -> str:
    """Download URL on the GitHub release page of llvm-project."""
    file = f"{prefix}{version}{suffix}"
    return f"https://github.com/llvm/llvm-project/releases/download/llvmorg-{version}/{file}"


def release_url(version: str, prefix: str, suffix: str) -> str:
    """Download URL on releases.llvm.org."""
    file = f"{prefix}{version}{suffix}"
    return f"https://releases.llvm.org/{version}/{file}"


def _hosted_url(version: str, prefix: str, suffix: str) -> str:
    if version_lte(version, RELEASES_HOST_MAX):
        return release_url(version, prefix, suffix)
    return github_url(version, prefix, suffix)


def darwin_url(version: str) -> Optional[str]:
    if version in DARWIN_MISSING:
        return None

    darwin = "-darwin-apple" if version == "9.0.0" else "-apple-darwin"
    return _hosted_url(version, "clang+llvm-", f"-x86_64{darwin}.tar.xz")


def linux_url(version: str) -> str:
    version = UBUNTU_RC.get(version, version)
    ubuntu = UBUNTU.get(version, UBUNTU[MAX_UBUNTU])

    if version == "5.0.0":
        suffix = f"-linux-x86_64{ubuntu}.tar.xz"
    else:
        suffix = f"-x86_64-linux-gnu{ubuntu}.tar.xz"
    return _hosted_url(version, "clang+llvm-", suffix)


class LLVMLocator(ArtifactLocator):
    """Locates prebuilt clang+llvm archives and Windows installers."""

    tool = "llvm"

    def specific_releases(self) -> Iterable[str]:
        return RELEASES

    async def artifact_url(
        self, platform: str, version: str, arch: str
    ) -> Optional[str]:
        if platform == "darwin":
            return darwin_url(version)
        if platform == "linux":
            return linux_url(version)
        if platform == "win32":
            return await self.win32_url(version)
        return None

    async def win32_url(self, version: str) -> Optional[str]:
        """
        Installer URL for Windows.

        Installers up to 9.0.1 should be on releases.llvm.org, but some were
        only uploaded to GitHub, so the old host is probed first.
        """
        if version in WIN32_MISSING:
            return None

        prefix = "LLVM-"
        suffix = "-win32.exe" if version_lte(version, WIN32_ONLY_MAX) else "-win64.exe"

        if version_lte(version, RELEASES_HOST_MAX):
            url = release_url(version, prefix, suffix)
            if await self.url_exists(url):
                return url
            logger.debug(f"LLVM {version} installer missing on releases.llvm.org")

        return github_url(version, prefix, suffix)

    def descriptor(
        self, platform: str, version: str, url: str, arch: str
    ) -> ArtifactDescriptor:
        # Archives hold a single clang+llvm-* folder; installers are flat
        strip = 0 if platform == "win32" else 1
        return ArtifactDescriptor(
            tool=self.tool,
            version=version,
            url=url,
            extracted_folder_name="",
            bin_relative_dir="bin",
            extract=functools.partial(extract_archive, strip_components=strip),
        )
