"""
Installable tools: the registry describing them, the Installer that installs
and activates them, and the Homebrew bootstrap.
"""

from setupkit.tools.installer import InstallationInfo, Installer
from setupkit.tools.registry import TOOLS, ToolSpec, canonical_name, get_tool, tool_names

__all__ = [
    "InstallationInfo",
    "Installer",
    "TOOLS",
    "ToolSpec",
    "canonical_name",
    "get_tool",
    "tool_names",
]
