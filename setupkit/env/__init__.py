"""
Environment management: in-process and persisted environment variables, the
shell rc file, and activation of installed tools.
"""

from setupkit.env.activator import EnvironmentActivator
from setupkit.env.environment import Environment
from setupkit.env.rc_file import finalize_rc, source_rc

__all__ = [
    "Environment",
    "EnvironmentActivator",
    "finalize_rc",
    "source_rc",
]
