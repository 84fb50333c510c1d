"""
Network helpers: archive download with retry logic and URL existence probes.

This module provides the two network primitives the installers consume:
- download_file(): streaming HTTP download with retries and exponential backoff
- url_exists(): HEAD probe used by the artifact locators to skip releases
  that were never published for a platform
"""

import logging
import time
from pathlib import Path

import requests
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)

USER_AGENT = "setupkit"


class DownloadError(Exception):
    """Exception raised when download fails."""

    pass


def download_file(
    url: str,
    destination: Path,
    timeout: int = 30,
    max_retries: int = 3,
) -> Path:
    """
    Download file from URL to destination with retry logic.

    Args:
        url: URL to download from
        destination: Local path to save file
        timeout: Request timeout in seconds
        max_retries: Maximum number of retry attempts

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If download fails after retries
        ValueError: If URL is empty

    Example:
        >>> from setupkit.core.download import download_file
        >>> download_file("https://example.com/tool.tar.xz", Path("cache/tool.tar.xz"))
    """
    if not url:
        raise ValueError("URL cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    for attempt in range(max_retries):
        try:
            return _download(url, destination, timeout)
        except RequestException as e:
            if attempt == max_retries - 1:
                raise DownloadError(
                    f"Download failed after {max_retries} attempts: {e}"
                ) from e

            backoff_seconds = 2**attempt
            logger.warning(
                f"Download attempt {attempt + 1} failed: {e}. "
                f"Retrying in {backoff_seconds}s..."
            )
            time.sleep(backoff_seconds)

    raise DownloadError(f"Download failed for unknown reason: {url}")


def _download(url: str, destination: Path, timeout: int) -> Path:
    logger.info(f"Downloading from {url}")

    response = requests.get(
        url,
        stream=True,
        timeout=timeout,
        allow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )
    response.raise_for_status()

    try:
        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=8192):
                if chunk:
                    f.write(chunk)
    except OSError as e:
        destination.unlink(missing_ok=True)
        raise DownloadError(f"Failed to write {destination}: {e}") from e

    logger.info(f"Download complete: {destination}")
    return destination


def url_exists(url: str, timeout: int = 10) -> bool:
    """
    Check whether a URL points at an existing resource.

    A HEAD request is sent with redirects followed (GitHub release assets
    redirect to a storage host). Any transport error counts as missing.

    Args:
        url: URL to probe
        timeout: Request timeout in seconds

    Returns:
        True if the server answered with a non-error status
    """
    try:
        response = requests.head(
            url,
            timeout=timeout,
            allow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )
    except RequestException as e:
        logger.debug(f"URL probe failed for {url}: {e}")
        return False

    exists = response.status_code < 400
    logger.debug(f"URL probe {url}: {response.status_code}")
    return exists
