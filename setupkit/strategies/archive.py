"""
Archive download strategy.

Locates a released archive with the tool's ArtifactLocator, downloads it and
extracts it under the setup root:

    <setup_root>/<tool>/<specific version>-<arch>/

An installation whose executable already exists is reused without
downloading. Extraction is guarded by a file lock so two processes never
write into the same directory.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

from setupkit.artifacts.base import ArtifactDescriptor, ArtifactLocator
from setupkit.core.directory import get_downloads_dir, get_tool_dir
from setupkit.core.download import download_file
from setupkit.core.exceptions import StrategyUnavailable
from setupkit.core.filesystem import (
    ArchiveExtractionError,
    find_executable,
    safe_rmtree,
)
from setupkit.core.locking import install_lock
from setupkit.strategies.base import InstallRequest, InstallStrategy

logger = logging.getLogger(__name__)

Downloader = Callable[[str, Path], Path]


class ArchiveStrategy(InstallStrategy):
    """
    Install from a released archive.

    Args:
        locator: Locator for the tool's release archives
        setup_dir: Setup root; see get_setup_dir() for the default
        download: Callable(url, destination) fetching one file
    """

    name = "archive"

    def __init__(
        self,
        locator: ArtifactLocator,
        setup_dir: Optional[Path] = None,
        download: Optional[Downloader] = None,
    ):
        self.locator = locator
        self.setup_dir = setup_dir
        self.download = download or download_file

    async def install(self, request: InstallRequest) -> Path:
        if not self.locator.is_supported(request.version):
            raise StrategyUnavailable(
                f"no {request.tool} release matches version '{request.version}'"
            )

        descriptor = await self.locator.resolve(
            request.platform.os, request.version, request.arch
        )
        destination = get_tool_dir(
            request.tool, descriptor.version, request.arch, self.setup_dir
        )
        return await asyncio.to_thread(
            self._install_archive, descriptor, destination, request.executable
        )

    def _install_archive(
        self, descriptor: ArtifactDescriptor, destination: Path, executable: str
    ) -> Path:
        bin_dir = descriptor.bin_dir(destination)

        with install_lock(destination):
            if find_executable(executable, [bin_dir]) is not None:
                logger.info(f"{descriptor.tool} {descriptor.version} is already installed in {destination}")
                return bin_dir

            archive = get_downloads_dir(self.setup_dir) / descriptor.archive_name
            logger.info(f"Installing {descriptor.tool} {descriptor.version} into {destination}")
            try:
                self.download(descriptor.url, archive)
                descriptor.extract(archive, destination)
            except Exception:
                # leave no half-extracted tree behind for the next attempt
                if destination.exists():
                    safe_rmtree(destination)
                raise
            finally:
                archive.unlink(missing_ok=True)

            if find_executable(executable, [bin_dir]) is None:
                raise ArchiveExtractionError(
                    f"{executable} not found in {bin_dir} after extracting {descriptor.archive_name}"
                )

        return bin_dir
