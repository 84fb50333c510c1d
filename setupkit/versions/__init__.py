"""Version request resolution."""

from setupkit.versions.resolver import (
    DEFAULT_SENTINELS,
    VersionRequest,
    VersionResolver,
    default_linux_version,
    is_version_default,
    sync_versions,
)

__all__ = [
    "DEFAULT_SENTINELS",
    "VersionRequest",
    "VersionResolver",
    "default_linux_version",
    "is_version_default",
    "sync_versions",
]
