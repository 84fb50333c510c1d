"""
Centralized exception hierarchy for SetupKit.

This module defines the custom exceptions shared by the resolver, the
artifact locators, the installation strategies and the environment
activator.
"""

from typing import List, Tuple


# ============================================================================
# Base Exceptions
# ============================================================================


class SetupKitError(Exception):
    """Base exception for all SetupKit errors."""

    pass


class ConfigurationError(SetupKitError):
    """Raised when a configuration file or data table is invalid."""

    pass


# ============================================================================
# Resolution Exceptions
# ============================================================================


class UnsupportedTarget(SetupKitError):
    """Raised when no artifact exists for the requested platform and version."""

    def __init__(self, platform: str, version: str, tool: str = ""):
        self.platform = platform
        self.version = version
        self.tool = tool
        prefix = f"{tool}: " if tool else ""
        super().__init__(
            f"{prefix}Unsupported target! (platform='{platform}', version='{version}')"
        )


# ============================================================================
# Strategy Exceptions
# ============================================================================


class StrategyError(SetupKitError):
    """Base exception for installation strategy errors."""

    pass


class StrategyUnavailable(StrategyError):
    """
    Raised by a strategy that cannot be used on this host.

    This is an expected condition: the selector moves on to the next
    strategy and never surfaces it to the caller.
    """

    pass


class StrategyFailed(StrategyError):
    """Raised when a strategy was attempted and errored."""

    def __init__(self, strategy: str, cause: BaseException):
        self.strategy = strategy
        self.cause = cause
        super().__init__(f"{strategy} failed: {cause}")


class AllStrategiesExhausted(StrategyError):
    """Raised when every strategy for a tool was unavailable or failed."""

    def __init__(
        self, tool: str, version: str, causes: List[Tuple[str, str]]
    ):
        self.tool = tool
        self.version = version
        self.causes = causes
        shown_version = version or "default"
        details = "; ".join(f"{name}: {reason}" for name, reason in causes)
        if not details:
            details = "no installation strategy is defined for this platform"
        super().__init__(
            f"Failed to install {tool} {shown_version}: {details}"
        )


# ============================================================================
# Package Manager Exceptions
# ============================================================================


class PackageManagerError(SetupKitError):
    """Base exception for native package manager errors."""

    pass


class PackageManagerNotFoundError(PackageManagerError):
    """Package manager not found or not installed."""

    pass


class PackageManagerInstallError(PackageManagerError):
    """Package manager returned an error while installing packages."""

    pass


# ============================================================================
# Activation Exceptions
# ============================================================================


class ActivationError(SetupKitError):
    """Raised when an environment mutation could not be applied."""

    pass
