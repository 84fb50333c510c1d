"""
Installation strategies and the fallback chain that selects among them.

- SystemStrategy: native OS package manager
- ArchiveStrategy: released archive located by an ArtifactLocator
- PipStrategy: pipx/pip, falling back to the distribution's Python package
"""

from setupkit.strategies.archive import ArchiveStrategy
from setupkit.strategies.base import (
    Failed,
    InstallRequest,
    InstallStrategy,
    Installed,
    StrategyOutcome,
    Unavailable,
    select_strategy,
)
from setupkit.strategies.pip import PipStrategy
from setupkit.strategies.system import NativePackage, SystemStrategy

__all__ = [
    "ArchiveStrategy",
    "Failed",
    "InstallRequest",
    "InstallStrategy",
    "Installed",
    "NativePackage",
    "PipStrategy",
    "StrategyOutcome",
    "SystemStrategy",
    "Unavailable",
    "select_strategy",
]
