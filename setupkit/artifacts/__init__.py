"""
Artifact locators.

Each locator maps a (platform, version, arch) request to one downloadable
archive, following the candidate-enumeration shape of ArtifactLocator.
"""

from setupkit.artifacts.base import (
    ArtifactDescriptor,
    ArtifactLocator,
    version_aliases,
)
from setupkit.artifacts.cmake import CMakeLocator
from setupkit.artifacts.llvm import LLVMLocator
from setupkit.artifacts.ninja import NinjaLocator

__all__ = [
    "ArtifactDescriptor",
    "ArtifactLocator",
    "version_aliases",
    "CMakeLocator",
    "LLVMLocator",
    "NinjaLocator",
]
