"""
SetupKit CLI module.

This module provides the command-line interface for SetupKit.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
