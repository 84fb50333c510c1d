"""
Process invocation helpers.

Thin wrappers around subprocess used to drive native package managers,
pip/pipx and update-alternatives.
"""

import logging
import os
import shutil
import subprocess
import sys
from typing import List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


class ProcessError(Exception):
    """Raised when a command exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, output: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        message = f"Command failed with exit code {returncode}: {' '.join(self.command)}"
        if output:
            message += f"\n{output.strip()}"
        super().__init__(message)


def which(name: str) -> Optional[str]:
    """Return the full path of an executable on PATH, or None."""
    return shutil.which(name)


def run_command(
    command: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    check: bool = True,
    capture: bool = False,
    timeout: Optional[int] = None,
) -> int:
    """
    Run a command and return its exit code.

    Args:
        command: Program and arguments
        env: Extra environment variables merged over os.environ
        check: Raise ProcessError on a non-zero exit code
        capture: Capture output instead of inheriting the parent's streams
        timeout: Optional timeout in seconds

    Returns:
        Process exit code

    Raises:
        ProcessError: If check is True and the command failed
        FileNotFoundError: If the program does not exist
    """
    full_env = None
    if env:
        full_env = dict(os.environ)
        full_env.update(env)

    logger.debug(f"Running: {' '.join(command)}")
    result = subprocess.run(
        list(command),
        env=full_env,
        capture_output=capture,
        text=True,
        timeout=timeout,
    )

    if check and result.returncode != 0:
        output = (result.stderr or result.stdout or "") if capture else ""
        raise ProcessError(command, result.returncode, output)

    return result.returncode


def command_output(command: Sequence[str], timeout: int = 30) -> str:
    """
    Run a command and return its stripped stdout (stderr if stdout is empty).

    Raises:
        ProcessError: If the command failed
    """
    result = subprocess.run(
        list(command), capture_output=True, text=True, timeout=timeout
    )
    if result.returncode != 0:
        raise ProcessError(command, result.returncode, result.stderr)
    return (result.stdout or result.stderr).strip()


def is_root() -> bool:
    return sys.platform != "win32" and os.geteuid() == 0


def elevated(command: Sequence[str]) -> List[str]:
    """Prefix a command with sudo when not running as root and sudo exists."""
    if sys.platform == "win32" or is_root() or which("sudo") is None:
        return list(command)
    return ["sudo", *command]


def run_elevated(
    command: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    check: bool = True,
) -> int:
    """Run a command with root privileges (see elevated())."""
    full_command = elevated(command)
    if env and full_command[0] == "sudo":
        # sudo drops the caller's environment unless it is passed explicitly
        full_command = ["sudo", *[f"{k}={v}" for k, v in env.items()], *command]
    return run_command(full_command, env=env, check=check)
