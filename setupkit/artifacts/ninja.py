"""
Ninja release locator.

Ninja is distributed as a zip holding a single executable.
"""

import functools
from typing import Iterable, Optional

from setupkit.artifacts.base import ArtifactDescriptor, ArtifactLocator, release_key
from setupkit.core.filesystem import extract_archive

RELEASES = (
    "1.8.2",
    "1.9.0",
    "1.10.0",
    "1.10.1",
    "1.10.2",
    "1.11.0",
    "1.11.1",
    "1.12.0",
    "1.12.1",
)

# First release with a Linux aarch64 build
LINUX_ARM64_MIN = "1.12.0"


class NinjaLocator(ArtifactLocator):
    """Locates Ninja release zips."""

    tool = "ninja"
    allow_unlisted = True

    def specific_releases(self) -> Iterable[str]:
        return RELEASES

    async def artifact_url(
        self, platform: str, version: str, arch: str
    ) -> Optional[str]:
        if platform == "linux":
            if arch == "arm64":
                if release_key(version) < release_key(LINUX_ARM64_MIN):
                    return None
                filename = "ninja-linux-aarch64.zip"
            else:
                filename = "ninja-linux.zip"
        elif platform == "darwin":
            filename = "ninja-mac.zip"
        elif platform == "win32":
            filename = "ninja-win.zip"
        else:
            return None

        return f"https://github.com/ninja-build/ninja/releases/download/v{version}/{filename}"

    def descriptor(
        self, platform: str, version: str, url: str, arch: str
    ) -> ArtifactDescriptor:
        return ArtifactDescriptor(
            tool=self.tool,
            version=version,
            url=url,
            extracted_folder_name="",
            bin_relative_dir="",
            extract=functools.partial(extract_archive, strip_components=0),
        )
