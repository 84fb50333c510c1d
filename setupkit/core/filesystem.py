"""
Cross-platform file system utilities for SetupKit.

This module provides the extraction half of the archive installer and a few
path helpers:
- Archive extraction (zip, tar.gz, tar.xz, tar.bz2, Windows .exe installers)
  with optional stripping of the archive's top-level directory
- Safe directory removal
- Executable lookup in explicit directories
"""

import os
import shutil
import subprocess
import sys
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import List, Optional, Union

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Errors
# ============================================================================


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Example:
        >>> is_relative_to(Path("/home/user/project/file.txt"), Path("/home/user"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def add_exe_ext(name: str, platform: Optional[str] = None) -> str:
    """Append '.exe' to an executable name on Windows."""
    platform = platform or sys.platform
    if platform == "win32" and not name.endswith(".exe"):
        return f"{name}.exe"
    return name


def find_executable(name: str, search_paths: List[Path]) -> Optional[Path]:
    """
    Find an executable in the given directories.

    Args:
        name: Executable name (e.g., 'clang', 'cmake')
        search_paths: Directories to search, in order

    Returns:
        Path to the first match, None otherwise
    """
    extensions = [""] if not IS_WINDOWS else ["", ".exe", ".bat", ".cmd"]

    for directory in search_paths:
        for ext in extensions:
            exe_path = Path(directory) / f"{name}{ext}"
            if exe_path.is_file():
                return exe_path
    return None


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    strip_components: int = 0,
) -> Path:
    """
    Extract an archive to a destination directory.

    Automatically detects archive format and extracts safely. With
    ``strip_components=1`` the single top-level directory of the archive is
    removed, the same way ``tar --strip-components=1`` does.

    Supported formats:
    - .zip
    - .tar.gz, .tgz
    - .tar.xz
    - .tar.bz2
    - .exe (NSIS installers, requires 7-Zip)

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to
        strip_components: Number of leading directories to strip (0 or 1)

    Returns:
        The destination directory

    Raises:
        UnsupportedArchiveFormat: If archive format is not recognized
        ArchiveExtractionError: If extraction fails
        InsecureArchiveError: If archive contains malicious paths

    Example:
        >>> extract_archive('clang+llvm-12.0.0.tar.xz', '/opt/llvm', strip_components=1)
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")
    if strip_components not in (0, 1):
        raise ValueError("strip_components must be 0 or 1")

    destination.mkdir(parents=True, exist_ok=True)

    if strip_components == 0:
        _extract_into(archive_path, destination)
        return destination

    staging = Path(tempfile.mkdtemp(prefix=".extract-", dir=destination.parent))
    try:
        _extract_into(archive_path, staging)
        entries = list(staging.iterdir())
        root = entries[0] if len(entries) == 1 and entries[0].is_dir() else staging
        for item in root.iterdir():
            target = destination / item.name
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            elif target.exists() or target.is_symlink():
                target.unlink()
            shutil.move(str(item), str(target))
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    return destination


def _extract_into(archive_path: Path, destination: Path) -> None:
    archive_name = archive_path.name.lower()

    try:
        if archive_name.endswith(".zip"):
            _extract_zip(archive_path, destination)
        elif archive_name.endswith((".tar.gz", ".tgz")):
            _extract_tar(archive_path, destination, "r:gz")
        elif archive_name.endswith(".tar.xz"):
            _extract_tar(archive_path, destination, "r:xz")
        elif archive_name.endswith((".tar.bz2", ".tbz2")):
            _extract_tar(archive_path, destination, "r:bz2")
        elif archive_name.endswith(".exe"):
            _extract_exe_installer(archive_path, destination)
        else:
            raise UnsupportedArchiveFormat(
                f"Unsupported archive format: {archive_path.suffix}. "
                "Supported: .zip, .tar.gz, .tar.xz, .tar.bz2, .exe"
            )
    except (InsecureArchiveError, UnsupportedArchiveFormat):
        raise
    except Exception as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.namelist()

        for member in members:
            _validate_archive_path(member, destination)

        zf.extractall(destination)

    # zipfile drops the executable bit
    if not IS_WINDOWS:
        for member in members:
            path = destination / member
            if path.is_file():
                path.chmod(path.stat().st_mode | 0o755)


def _extract_tar(archive_path: Path, destination: Path, mode: str) -> None:
    """Extract a tar archive with specified compression."""
    with tarfile.open(archive_path, mode) as tar:
        for member in tar.getmembers():
            _validate_archive_path(member.name, destination)

        # Paths were validated above for interpreters without extraction filters
        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)


def _extract_exe_installer(archive_path: Path, destination: Path) -> None:
    """Extract a Windows .exe installer using 7zip."""
    seven_zip = shutil.which("7z") or shutil.which("7za")

    if not seven_zip:
        common_paths = [
            r"C:\Program Files\7-Zip\7z.exe",
            r"C:\Program Files (x86)\7-Zip\7z.exe",
        ]
        for path in common_paths:
            if Path(path).exists():
                seven_zip = path
                break

    if not seven_zip:
        raise UnsupportedArchiveFormat(
            "Extracting .exe installers requires 7-Zip. "
            "Install from: https://www.7-zip.org/ or use: winget install 7zip.7zip"
        )

    cmd = [seven_zip, "x", str(archive_path), f"-o{destination}", "-y"]
    try:
        subprocess.run(cmd, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as e:
        raise ArchiveExtractionError(f"7-Zip extraction failed: {e.stderr}") from e


# ============================================================================
# Safe File Operations
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e
