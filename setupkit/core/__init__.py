"""
Core functionality for SetupKit.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    get_setup_dir,
    get_tool_dir,
    get_downloads_dir,
    DirectoryError,
)

from .locking import (
    install_lock,
    InstallLockTimeout,
)

from .memoize import IdempotencyCache

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .exceptions import (
    SetupKitError,
    ConfigurationError,
    UnsupportedTarget,
    StrategyError,
    StrategyUnavailable,
    StrategyFailed,
    AllStrategiesExhausted,
    PackageManagerError,
    PackageManagerNotFoundError,
    PackageManagerInstallError,
    ActivationError,
)

__all__ = [
    # Directory
    "get_setup_dir",
    "get_tool_dir",
    "get_downloads_dir",
    "DirectoryError",
    # Locking
    "install_lock",
    "InstallLockTimeout",
    # Memoization
    "IdempotencyCache",
    # Platform
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    # Exceptions
    "SetupKitError",
    "ConfigurationError",
    "UnsupportedTarget",
    "StrategyError",
    "StrategyUnavailable",
    "StrategyFailed",
    "AllStrategiesExhausted",
    "PackageManagerError",
    "PackageManagerNotFoundError",
    "PackageManagerInstallError",
    "ActivationError",
]
