"""
Version resolution.

Turns a version request ("12", "true", None, ...) into the concrete version
string handed to the installation strategies. An empty string means "let the
strategy choose" (for native package managers: whatever the distribution
ships).

Example:
    >>> table = DefaultVersionTable(linux_versions={"gcc": {20: "10", 22: "11"}})
    >>> resolver = VersionResolver(table)
    >>> resolver.resolve(VersionRequest("gcc", "true", "linux", (22, 4)))
    '11'
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, MutableMapping, Optional, Sequence

from setupkit.config.defaults import DefaultVersionTable

logger = logging.getLogger(__name__)

# Requests that mean "install the default version"
DEFAULT_SENTINELS = ("true", "default")


def is_version_default(version: Optional[str]) -> bool:
    return version is None or version in DEFAULT_SENTINELS


@dataclass(frozen=True)
class VersionRequest:
    """
    A single version request.

    Attributes:
        tool_name: Tool being requested (e.g. 'gcc')
        requested_version: Free-form version, a default sentinel, or None
        platform: 'linux', 'darwin' or 'win32'
        os_release: Numeric OS release (e.g. (22, 4)), when known
    """

    tool_name: str
    requested_version: Optional[str]
    platform: str
    os_release: Optional[Sequence[int]] = None


class VersionResolver:
    """Resolves version requests against a DefaultVersionTable."""

    def __init__(self, table: DefaultVersionTable):
        self.table = table

    def resolve(self, request: VersionRequest) -> str:
        """
        Resolve a request into a concrete version.

        Rules, in order:
        1. default requested on Linux with a release-scoped table for the tool:
           the entry with the largest OS major version <= the host's, or ""
        2. default requested with a platform-independent default: that default
        3. default requested with no table entry: ""
        4. anything else is returned unchanged

        Returns:
            Concrete version string, possibly empty
        """
        name = request.tool_name
        requested = request.requested_version

        if not is_version_default(requested):
            return requested or ""

        if (
            request.platform == "linux"
            and request.os_release
            and name in self.table.linux_versions
        ):
            version = default_linux_version(
                request.os_release, self.table.linux_versions[name]
            )
            logger.debug(
                f"Default {name} for OS release {tuple(request.os_release)}: "
                f"{version or '<package manager default>'}"
            )
            return version

        if name in self.table.versions:
            return self.table.versions[name]

        return ""


def default_linux_version(
    os_release: Sequence[int], tool_versions: Mapping[int, str]
) -> str:
    """
    Choose the version block the OS release falls into.

    Returns the entry whose key is the largest value <= the OS major version,
    or "" when the host is older than every key.
    """
    os_major = os_release[0]
    satisfying = [key for key in tool_versions if key <= os_major]
    if not satisfying:
        return ""
    return tool_versions[max(satisfying)]


def sync_versions(options: MutableMapping[str, Optional[str]], tools: Iterable[str]) -> bool:
    """
    Make a group of tools share one version.

    Among the tools present in options, every explicit (non-default) version
    must be identical. When they are, all requested tools of the group are set
    to that version, or to the default sentinel when none is explicit.

    Args:
        options: Tool name -> requested version; tools not requested are absent
            or None
        tools: Names of the tools that must share a version

    Returns:
        False (and options untouched) if explicit versions disagree
    """
    in_use = [tool for tool in tools if options.get(tool) is not None]
    explicit: Dict[str, str] = {
        tool: options[tool] for tool in in_use if not is_version_default(options[tool])
    }

    target = next(iter(explicit.values()), "true")
    if any(version != target for version in explicit.values()):
        return False

    for tool in in_use:
        options[tool] = target
    return True
