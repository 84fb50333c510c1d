"""
Directory management for SetupKit.

Directory Structure:
    Setup root (SETUPKIT_DIR, default ~/setupkit or %USERPROFILE%\\setupkit):
        - <tool>/<version>-<arch>/ : Archive installations
        - downloads/               : Downloaded archives (removed after extraction)
"""

import os
from pathlib import Path
from typing import Optional


class DirectoryError(Exception):
    """Base exception for directory-related errors."""

    pass


def get_setup_dir(override: Optional[Path] = None) -> Path:
    """
    Get the root directory that archive installations are placed under.

    Args:
        override: Explicit directory (from configuration or the CLI)

    Returns:
        Path: The setup root.
            - override, if given
            - $SETUPKIT_DIR, if set
            - Windows: %USERPROFILE%\\setupkit
            - Linux/macOS: ~/setupkit

    Example:
        >>> print(get_setup_dir())
        /home/user/setupkit  # on Linux
    """
    if override is not None:
        return Path(override).expanduser().resolve()

    from_env = os.environ.get("SETUPKIT_DIR")
    if from_env:
        return Path(from_env).expanduser().resolve()

    if os.name == "nt":
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise DirectoryError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine setup directory."
            )
        return Path(user_profile) / "setupkit"
    return Path.home() / "setupkit"


def get_tool_dir(
    tool: str, version: str, arch: str, setup_dir: Optional[Path] = None
) -> Path:
    """Installation directory for one version of a tool, e.g. ~/setupkit/llvm/12.0.0-x64."""
    return get_setup_dir(setup_dir) / tool / f"{version}-{arch}"


def get_downloads_dir(setup_dir: Optional[Path] = None) -> Path:
    return get_setup_dir(setup_dir) / "downloads"
