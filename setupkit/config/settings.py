"""YAML configuration for SetupKit.

This module loads the optional ``setupkit.yaml`` project file and applies
environment variable overrides.

Example setupkit.yaml:

    dir: ~/toolchains
    rc_file: ~/.cpprc
    persist: true
    versions:        # overrides of the packaged default table
      gcc: "12"
    tools:           # tools installed when the CLI gets no tool flags
      llvm: "12"
      cmake: true
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml

from setupkit.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "setupkit.yaml"


def default_rc_file() -> Path:
    return Path.home() / ".cpprc"


@dataclass
class SetupConfig:
    """Complete SetupKit configuration."""

    setup_dir: Optional[Path] = None
    rc_file: Path = field(default_factory=default_rc_file)
    persist: bool = True
    versions: Dict[str, str] = field(default_factory=dict)
    tools: Dict[str, str] = field(default_factory=dict)


def load_config(config_path: Optional[Path] = None) -> SetupConfig:
    """
    Load configuration from a YAML file and the environment.

    Args:
        config_path: Explicit configuration file. When None, ``setupkit.yaml``
            in the current directory is used if it exists.

    Returns:
        Parsed configuration

    Raises:
        ConfigurationError: If the file is invalid, or an explicit file is missing
    """
    data: dict = {}

    if config_path is not None and not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    path = config_path or Path.cwd() / DEFAULT_CONFIG_NAME
    if path.exists():
        logger.debug(f"Loading configuration from {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    config = _parse(data)
    _apply_environment(config)
    return config


def _parse(data: dict) -> SetupConfig:
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a mapping")

    config = SetupConfig()

    if data.get("dir"):
        config.setup_dir = Path(str(data["dir"])).expanduser()
    if data.get("rc_file"):
        config.rc_file = Path(str(data["rc_file"])).expanduser()
    if "persist" in data:
        if not isinstance(data["persist"], bool):
            raise ConfigurationError("'persist' must be true or false")
        config.persist = data["persist"]

    for key in ("versions", "tools"):
        section = data.get(key) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"'{key}' must map tool names to versions")
        # YAML turns `cmake: true` into a bool; keep the CLI spelling
        parsed = {
            str(tool): ("true" if value is True else str(value))
            for tool, value in section.items()
            if value is not False and value is not None
        }
        setattr(config, key, parsed)

    return config


def _apply_environment(config: SetupConfig) -> None:
    setup_dir = os.environ.get("SETUPKIT_DIR")
    if setup_dir:
        config.setup_dir = Path(setup_dir).expanduser()

    rc_file = os.environ.get("SETUPKIT_RC_FILE")
    if rc_file:
        config.rc_file = Path(rc_file).expanduser()

    if os.environ.get("SETUPKIT_NO_PERSIST", "") not in ("", "0"):
        config.persist = False
