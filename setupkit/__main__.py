"""
Entry point for running SetupKit CLI as a module.

Usage: python -m setupkit [options]
"""

from setupkit.cli.parser import main

if __name__ == "__main__":
    main()
