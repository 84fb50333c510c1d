"""
Default version tables.

The tables are loaded once from the packaged ``data/default_versions.yaml``
and handed to the version resolver explicitly; nothing mutates them after
loading.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import yaml

from setupkit.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _default_data_path() -> Path:
    return Path(__file__).parent.parent / "data" / "default_versions.yaml"


@dataclass(frozen=True)
class DefaultVersionTable:
    """
    Read-only default versions.

    Attributes:
        versions: tool name -> version, used on every platform
        linux_versions: tool name -> (OS major version -> version), used on Linux
    """

    versions: Mapping[str, str] = field(default_factory=dict)
    linux_versions: Mapping[str, Mapping[int, str]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "versions", MappingProxyType(dict(self.versions)))
        object.__setattr__(
            self,
            "linux_versions",
            MappingProxyType(
                {
                    tool: MappingProxyType(dict(table))
                    for tool, table in self.linux_versions.items()
                }
            ),
        )

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "DefaultVersionTable":
        """
        Load the tables from a YAML file.

        Args:
            path: YAML file. Defaults to the packaged default_versions.yaml

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        path = path or _default_data_path()
        if not path.exists():
            raise ConfigurationError(f"Default version table not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        table = cls.from_dict(data)
        logger.debug(
            f"Loaded default versions for {len(table.versions)} tools from {path}"
        )
        return table

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DefaultVersionTable":
        if not isinstance(data, dict):
            raise ConfigurationError("Default version table must be a mapping")

        versions = {
            str(tool): str(version)
            for tool, version in (data.get("defaults") or {}).items()
        }

        linux_versions: Dict[str, Dict[int, str]] = {}
        for tool, table in (data.get("linux_defaults") or {}).items():
            if not isinstance(table, dict):
                raise ConfigurationError(
                    f"linux_defaults.{tool} must map OS major versions to versions"
                )
            try:
                linux_versions[str(tool)] = {
                    int(major): str(version) for major, version in table.items()
                }
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"linux_defaults.{tool} has a non-numeric OS version key: {e}"
                ) from e

        return cls(versions=versions, linux_versions=linux_versions)

    def __contains__(self, tool: object) -> bool:
        return tool in self.versions or tool in self.linux_versions

    def with_overrides(self, versions: Mapping[str, str]) -> "DefaultVersionTable":
        """
        Return a new table whose platform-independent defaults are overridden.

        A tool overridden here no longer uses its Linux release table.
        """
        if not versions:
            return self
        merged = dict(self.versions)
        merged.update({str(k): str(v) for k, v in versions.items()})
        linux = {k: v for k, v in self.linux_versions.items() if k not in versions}
        return DefaultVersionTable(versions=merged, linux_versions=linux)
