"""Configuration module for SetupKit.

This module provides the packaged default version table and the optional
setupkit.yaml project configuration.
"""

from setupkit.config.defaults import DefaultVersionTable
from setupkit.config.settings import (
    DEFAULT_CONFIG_NAME,
    SetupConfig,
    default_rc_file,
    load_config,
)

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "DefaultVersionTable",
    "SetupConfig",
    "default_rc_file",
    "load_config",
]
