"""
Homebrew bootstrap.

Homebrew is the native package manager on macOS and an optional one on
Linux. When it is missing, the official install script is run
non-interactively. The installer is not safe to run twice concurrently, so the
bootstrap goes through an IdempotencyCache.
"""

import asyncio
import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from setupkit.core import process
from setupkit.core.download import DownloadError, download_file
from setupkit.core.memoize import IdempotencyCache
from setupkit.core.platform import PlatformInfo, detect_platform
from setupkit.env.environment import Environment

logger = logging.getLogger(__name__)

INSTALL_SCRIPT_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

# Errors a failed bootstrap surfaces with
BOOTSTRAP_ERRORS = (
    process.ProcessError,
    DownloadError,
    OSError,
    subprocess.TimeoutExpired,
)

_bootstrap: IdempotencyCache[Optional[Path]] = IdempotencyCache("brew")


def brew_bin_dir(platform: PlatformInfo) -> Path:
    """
    Where the install script puts brew.

    Raises:
        ValueError: On platforms Homebrew does not support
    """
    if platform.os == "darwin":
        if platform.arch == "arm64":
            return Path("/opt/homebrew/bin")
        return Path("/usr/local/bin")
    if platform.os == "linux":
        return Path("/home/linuxbrew/.linuxbrew/bin")
    raise ValueError(f"Homebrew is not available on {platform.os}")


async def setup_brew(
    environment: Environment, platform: Optional[PlatformInfo] = None
) -> Optional[Path]:
    """
    Make sure Homebrew is installed.

    Args:
        environment: Environment that gets brew's bin directory on PATH
        platform: Host platform; detected when omitted

    Returns:
        Directory holding the brew executable, or None on Windows
    """
    platform = platform or detect_platform()
    if platform.os not in ("darwin", "linux"):
        return None
    return await _bootstrap.memoize(
        platform.os, lambda: asyncio.to_thread(_setup_brew, environment, platform)
    )


def _setup_brew(environment: Environment, platform: PlatformInfo) -> Path:
    existing = process.which("brew")
    if existing is not None:
        logger.debug(f"Found brew at {existing}")
        return Path(existing).parent

    with tempfile.TemporaryDirectory(prefix="setupkit-brew-") as tmp:
        script = download_file(INSTALL_SCRIPT_URL, Path(tmp) / "install-brew.sh")
        logger.info("Installing Homebrew")
        process.run_command(["/bin/bash", str(script)], env={"NONINTERACTIVE": "1"})

    bin_dir = brew_bin_dir(platform)
    environment.add_path(bin_dir)
    return bin_dir


def clear_brew_cache() -> None:
    """Forget the bootstrap result (for tests)."""
    _bootstrap.clear()
