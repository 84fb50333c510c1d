"""
Artifact locator base classes.

A locator maps (platform, version, arch) to one downloadable archive. Releases
are sparse and irregular across platforms, so every locator follows the same
shape:

1. expand the request into the known specific versions it matches,
   most recent first ("12" -> 12.0.1, 12.0.0)
2. build the platform-specific URL for each candidate, skipping candidates
   listed as never published for the platform
3. return the first candidate whose URL the existence probe confirms
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set, Tuple

from packaging.version import InvalidVersion, Version

from setupkit.core import download
from setupkit.core.exceptions import UnsupportedTarget

logger = logging.getLogger(__name__)

UrlProbe = Callable[[str], bool]
ExtractFunction = Callable[[Path, Path], Path]

_SPECIFIC_VERSION = re.compile(r"^\d+\.\d+\.\d+$")


@dataclass(frozen=True)
class ArtifactDescriptor:
    """
    One concrete, downloadable install artifact.

    Attributes:
        tool: Tool name
        version: Specific version the artifact contains
        url: Download URL
        extracted_folder_name: Folder the archive creates inside the
            destination ("" when extraction strips it)
        bin_relative_dir: Directory holding executables, relative to the
            extracted folder
        extract: Callable(archive_path, destination) -> destination
    """

    tool: str
    version: str
    url: str
    extracted_folder_name: str
    bin_relative_dir: str
    extract: ExtractFunction

    @property
    def archive_name(self) -> str:
        return self.url.rsplit("/", 1)[-1]

    def bin_dir(self, destination: Path) -> Path:
        root = Path(destination)
        if self.extracted_folder_name:
            root = root / self.extracted_folder_name
        return root / self.bin_relative_dir if self.bin_relative_dir else root


def version_aliases(specific: Iterable[str]) -> Set[str]:
    """
    Specific versions plus their minimum-specificity aliases.

    Example:
        >>> sorted(version_aliases(["3.5.2"]))
        ['3', '3.5', '3.5.2']
    """
    versions = set()
    for version in specific:
        versions.add(version)
        parts = version.split(".")
        versions.add(parts[0])
        if len(parts) > 1:
            versions.add(".".join(parts[:2]))
    return versions


def release_key(version: str) -> Version:
    try:
        return Version(version)
    except InvalidVersion:
        return Version("0")


def version_lte(version: str, threshold: str) -> bool:
    """True when version <= threshold in release order."""
    return release_key(version) <= release_key(threshold)


class ArtifactLocator(ABC):
    """
    Base class for tool-specific artifact locators.

    Subclasses declare the tool name and the specific versions ever released,
    and implement artifact_url() and descriptor().

    Attributes:
        tool: Tool name used in errors and descriptors
        allow_unlisted: Accept fully specified versions missing from the
            registry and let the existence probe decide
    """

    tool: str = ""
    allow_unlisted: bool = False

    def __init__(self, url_exists: Optional[UrlProbe] = None):
        self._url_exists = url_exists or download.url_exists

    @abstractmethod
    def specific_releases(self) -> Iterable[str]:
        """All historically released major.minor.patch versions."""

    @abstractmethod
    async def artifact_url(
        self, platform: str, version: str, arch: str
    ) -> Optional[str]:
        """
        Build the download URL for one specific version.

        Returns:
            URL, or None when no artifact was ever published for the platform
        """

    @abstractmethod
    def descriptor(
        self, platform: str, version: str, url: str, arch: str
    ) -> ArtifactDescriptor:
        """Describe how the located archive is extracted and laid out."""

    def versions(self) -> Set[str]:
        """Specific versions plus 'major' and 'major.minor' aliases."""
        return version_aliases(self.specific_releases())

    def is_supported(self, version: str) -> bool:
        if version == "" or version in self.versions():
            return True
        return self.allow_unlisted and bool(_SPECIFIC_VERSION.match(version))

    def specific_versions(self, version: str) -> List[str]:
        """
        Known specific versions compatible with version, most recent first.

        An empty version matches every release.
        """
        matches = {
            v
            for v in self.specific_releases()
            if version == "" or v == version or v.startswith(version + ".")
        }
        if not matches and self.allow_unlisted and _SPECIFIC_VERSION.match(version):
            matches = {version}
        return sorted(matches, key=release_key, reverse=True)

    async def url_exists(self, url: str) -> bool:
        return await asyncio.to_thread(self._url_exists, url)

    async def locate(
        self, platform: str, version: str, arch: str = "x64"
    ) -> Tuple[str, str]:
        """
        Find the most recent specific version with a reachable artifact.

        Args:
            platform: 'linux', 'darwin' or 'win32'
            version: Specific version, alias ('12', '12.0') or "" for latest
            arch: Target architecture

        Returns:
            (specific_version, url)

        Raises:
            UnsupportedTarget: If no candidate has a reachable artifact
        """
        if not self.is_supported(version):
            raise UnsupportedTarget(platform, version, self.tool)

        for specific in self.specific_versions(version):
            url = await self.artifact_url(platform, specific, arch)
            if url is None:
                logger.debug(f"{self.tool} {specific} was never released for {platform}")
                continue
            if await self.url_exists(url):
                logger.debug(f"Located {self.tool} {specific}: {url}")
                return specific, url
            logger.debug(f"{self.tool} {specific} not reachable at {url}")

        raise UnsupportedTarget(platform, version, self.tool)

    async def resolve(
        self, platform: str, version: str, arch: str = "x64"
    ) -> ArtifactDescriptor:
        """Locate an artifact and describe it."""
        specific, url = await self.locate(platform, version, arch)
        return self.descriptor(platform, specific, url, arch)
