"""
Process environment with persistence.

Environment is the single owner of environment mutations. Each change is
applied to the in-process environment right away and, unless persistence is
disabled, recorded for future shells:

- Linux/macOS: an ``export`` line appended to the rc file (~/.cpprc)
- Windows: ``setx`` for the user environment

Example:
    env = Environment(rc_file=Path.home() / ".cpprc")
    env.add_path("/opt/llvm/bin")
    env.set_env("CC", "/opt/llvm/bin/clang")
"""

import logging
import os
import subprocess
import sys
import threading
from pathlib import Path
from typing import List, MutableMapping, Optional, Union

from setupkit.core import process

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class Environment:
    """
    Environment variables of this process plus their persisted copy.

    Args:
        rc_file: Shell rc file receiving export lines (Linux/macOS)
        persist: Record changes for future shells
        environ: Mapping to mutate; os.environ by default
        platform: sys.platform value deciding how changes are persisted
    """

    def __init__(
        self,
        rc_file: Optional[PathLike] = None,
        persist: bool = True,
        environ: Optional[MutableMapping[str, str]] = None,
        platform: Optional[str] = None,
    ):
        self.rc_file = Path(rc_file).expanduser() if rc_file else Path.home() / ".cpprc"
        self.persist = persist
        self.environ = os.environ if environ is None else environ
        self.platform = platform or sys.platform
        self._lock = threading.RLock()

    @property
    def separator(self) -> str:
        return ";" if self.platform == "win32" else ":"

    def get(self, name: str, default: str = "") -> str:
        return self.environ.get(name, default)

    def entries(self, name: str) -> List[str]:
        """Path-list variable split into its entries."""
        value = self.environ.get(name, "")
        return [entry for entry in value.split(self.separator) if entry]

    # =========================================================================
    # Mutations
    # =========================================================================

    def set_env(self, name: str, value: PathLike) -> None:
        """Set a variable now and for future shells. Last writer wins."""
        value = str(value)
        with self._lock:
            if self.environ.get(name) == value:
                return
            self.environ[name] = value
            logger.debug(f"{name}={value}")
            self._persist_variable(name, value)

    def add_path(self, path: PathLike) -> None:
        """Prepend a directory to PATH unless it is already on it."""
        self.prepend_search_path("PATH", path)

    def prepend_search_path(self, name: str, path: PathLike) -> None:
        """
        Prepend an entry to a path-list variable (PATH, LD_LIBRARY_PATH, ...).

        An entry that is already present is left where it is, so repeated
        activation does not accumulate duplicates.
        """
        entry = str(path)
        with self._lock:
            current = self.entries(name)
            if _normalize(entry) in (_normalize(e) for e in current):
                logger.debug(f"{entry} is already in {name}")
                return
            self.environ[name] = self.separator.join([entry, *current])
            logger.debug(f"Prepended {entry} to {name}")
            self._persist_search_path(name, entry)

    # =========================================================================
    # Persistence
    # =========================================================================

    def _persist_variable(self, name: str, value: str) -> None:
        if not self.persist:
            return
        if self.platform == "win32":
            self._setx(name, value)
        else:
            self._append_rc(f'export {name}="{value}"')

    def _persist_search_path(self, name: str, entry: str) -> None:
        if not self.persist:
            return
        if self.platform == "win32":
            self._setx(name, self.environ[name])
        else:
            self._append_rc(f'export {name}="{entry}:${name}"')

    def _append_rc(self, line: str) -> None:
        try:
            self.rc_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.rc_file, "a", encoding="utf-8") as f:
                f.write(f"\n{line}\n")
        except OSError as e:
            logger.warning(f"Failed to write '{line}' to {self.rc_file}: {e}")

    def _setx(self, name: str, value: str) -> None:
        try:
            process.run_command(["setx", name, value], capture=True)
        except (process.ProcessError, OSError, subprocess.TimeoutExpired) as e:
            logger.warning(f"Failed to persist {name} with setx. You should set it manually: {e}")

    def __repr__(self) -> str:
        return f"Environment(rc_file={self.rc_file}, persist={self.persist})"


def _normalize(path: str) -> str:
    return os.path.normcase(os.path.normpath(path))
