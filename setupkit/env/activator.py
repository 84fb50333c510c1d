"""
Environment activation for installed tools.

After a tool is installed its bin directory is put on PATH. Compilers need
more: compiler-selection variables, library search paths, include/library
flags and, on Debian-family Linux, registration with update-alternatives so
that plain 'cc'/'c++' resolve to the installed compiler.

Activation is best effort. A step that fails is logged and skipped; the
installation is not rolled back. Every step is idempotent, so activating the
same directory twice leaves the environment as activating it once.
"""

import logging
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Union

from setupkit.core import process
from setupkit.core.exceptions import ActivationError
from setupkit.core.filesystem import add_exe_ext
from setupkit.core.platform import PlatformInfo
from setupkit.env.environment import Environment

logger = logging.getLogger(__name__)

# update-alternatives priority for installed compilers
ALTERNATIVES_PRIORITY = 40

# Directories shared by many packages; their parent is no single tool's prefix
SHARED_BIN_DIRS = frozenset(
    {
        Path("/bin"),
        Path("/usr/bin"),
        Path("/usr/local/bin"),
        Path("C:/ProgramData/chocolatey/bin"),
    }
)

_STEP_ERRORS = (
    ActivationError,
    process.ProcessError,
    OSError,
    subprocess.TimeoutExpired,
)


class EnvironmentActivator:
    """
    Applies the environment effects of installed tools.

    Args:
        environment: Environment receiving the mutations
        platform: Host platform

    Example:
        activator = EnvironmentActivator(Environment(), detect_platform())
        activator.activate("llvm", Path("~/setupkit/llvm/12.0.0-x64/bin"))
    """

    def __init__(self, environment: Environment, platform: PlatformInfo):
        self.environment = environment
        self.platform = platform
        self.failures: List[str] = []

    def activate(self, tool: str, bin_dir: Union[str, Path], version: str = "") -> bool:
        """
        Activate an installed tool.

        Args:
            tool: Tool name (aliases already resolved)
            bin_dir: Directory holding the tool's executables
            version: Installed version, used to find versioned executables

        Returns:
            True if every step succeeded
        """
        bin_dir = Path(bin_dir)
        failures_before = len(self.failures)

        self._step(f"add {bin_dir} to PATH", lambda: self.environment.add_path(bin_dir))
        if tool == "llvm":
            if bin_dir in SHARED_BIN_DIRS:
                self.activate_clang(bin_dir)
            else:
                self.activate_llvm(bin_dir.parent)
        elif tool == "gcc":
            self.activate_gcc(bin_dir, version)

        return len(self.failures) == failures_before

    # =========================================================================
    # Compilers
    # =========================================================================

    def activate_llvm(self, install_dir: Union[str, Path]) -> None:
        """
        Point the build environment at an LLVM installation.

        Sets LLVM_PATH, CC/CXX, LDFLAGS/CPPFLAGS and prepends <install_dir>/lib
        to the dynamic library search paths.
        """
        install_dir = Path(install_dir)
        bin_dir = install_dir / "bin"
        lib_dir = install_dir / "lib"
        env = self.environment

        self._step("set LLVM_PATH", lambda: env.set_env("LLVM_PATH", install_dir))
        if self.platform.os != "win32":
            for variable in ("LD_LIBRARY_PATH", "DYLD_LIBRARY_PATH"):
                self._step(
                    f"prepend {lib_dir} to {variable}",
                    lambda variable=variable: env.prepend_search_path(variable, lib_dir),
                )

        self._step("set LDFLAGS", lambda: env.set_env("LDFLAGS", f"-L{lib_dir}"))
        self._step("set CPPFLAGS", lambda: env.set_env("CPPFLAGS", f"-I{install_dir / 'include'}"))

        self.activate_clang(bin_dir)

    def activate_clang(self, bin_dir: Union[str, Path]) -> None:
        """
        Select the clang in bin_dir as the C and C++ compiler.

        Used alone for a clang living in a shared directory such as /usr/bin,
        whose prefix holds other packages' libraries and headers.
        """
        bin_dir = Path(bin_dir)
        env = self.environment
        clang = bin_dir / self._exe("clang")
        clangxx = bin_dir / self._exe("clang++")
        self._step("set CC", lambda: env.set_env("CC", clang))
        self._step("set CXX", lambda: env.set_env("CXX", clangxx))

        self.setup_macos_sdk()

        if self.platform.is_debian_family():
            self._step("register clang alternatives", lambda: self._register_alternatives(
                [("cc", clang), ("c++", clangxx)]
            ))

    def activate_gcc(self, bin_dir: Union[str, Path], version: str = "") -> None:
        """
        Point the build environment at a GCC installation.

        Versioned executables (gcc-11, g++-11) are preferred when they exist,
        which is how distribution packages ship non-default GCC versions.
        """
        bin_dir = Path(bin_dir)
        gcc = self._versioned(bin_dir, "gcc", version)
        gxx = self._versioned(bin_dir, "g++", version)
        env = self.environment

        self._step("set CC", lambda: env.set_env("CC", gcc))
        self._step("set CXX", lambda: env.set_env("CXX", gxx))

        self.setup_macos_sdk()

        if self.platform.is_debian_family():
            links = [("cc", gcc), ("c++", gxx)]
            if gcc.name != "gcc":
                links += [("gcc", gcc), ("g++", gxx)]
            self._step("register gcc alternatives", lambda: self._register_alternatives(links))

    def setup_macos_sdk(self) -> None:
        """Set SDKROOT from xcrun on macOS; no-op elsewhere."""
        if self.platform.os != "darwin":
            return

        def set_sdkroot():
            sdkroot = process.command_output(["xcrun", "--sdk", "macosx", "--show-sdk-path"])
            if not sdkroot:
                raise ActivationError("xcrun returned no SDK path")
            self.environment.set_env("SDKROOT", sdkroot)

        self._step("set SDKROOT", set_sdkroot)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _exe(self, name: str) -> str:
        return add_exe_ext(name, self.platform.os)

    def _versioned(self, bin_dir: Path, name: str, version: str) -> Path:
        major = version.split(".")[0] if version else ""
        if major:
            candidate = bin_dir / self._exe(f"{name}-{major}")
            if candidate.exists():
                return candidate
        return bin_dir / self._exe(name)

    def _register_alternatives(self, links) -> None:
        for name, target in links:
            process.run_elevated(
                [
                    "update-alternatives",
                    "--install",
                    f"/usr/bin/{name}",
                    name,
                    str(target),
                    str(ALTERNATIVES_PRIORITY),
                ]
            )

    def _step(self, description: str, action: Callable[[], Optional[object]]) -> None:
        try:
            action()
        except _STEP_ERRORS as e:
            logger.warning(f"Activation step '{description}' failed: {e}")
            self.failures.append(description)
