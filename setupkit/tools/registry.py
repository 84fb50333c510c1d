"""
Tool registry.

Each supported tool is described by a ToolSpec: its main executable, the
order in which installation strategies are tried, the packages native
package managers ship it in, the locator for its release archives and its
name on the Python package index.

Aliases name the same installation: 'clang', 'clangtidy' and 'clangformat'
are all provided by the LLVM release, 'g++' by GCC.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple, Type

from setupkit.artifacts import CMakeLocator, LLVMLocator, NinjaLocator
from setupkit.artifacts.base import ArtifactLocator
from setupkit.core.exceptions import ConfigurationError
from setupkit.strategies.system import NativePackage

SYSTEM = "system"
ARCHIVE = "archive"
PIP = "pip"


@dataclass(frozen=True)
class ToolSpec:
    """
    Static description of one installable tool.

    Attributes:
        name: Canonical tool name
        executable: Main executable, used to verify and locate installations
        strategies: Strategy names in the order they are tried
        native: Native package manager name -> packages providing the tool
        locator: ArtifactLocator class for release archives
        pip_package: Name on the Python package index
        library: Install the pip package as a library (never through pipx)
        aliases: Other names resolving to this tool
    """

    name: str
    executable: str
    strategies: Tuple[str, ...]
    native: Mapping[str, NativePackage] = field(default_factory=dict)
    locator: Optional[Type[ArtifactLocator]] = None
    pip_package: str = ""
    library: bool = False
    aliases: Tuple[str, ...] = ()


def _everywhere(name: str, **overrides: NativePackage) -> Dict[str, NativePackage]:
    """Same unversioned package name for every manager."""
    native = {
        "apt": NativePackage((name,)),
        "dnf": NativePackage((name,)),
        "pacman": NativePackage((name,)),
        "brew": NativePackage((name,)),
        "choco": NativePackage((name,), pin=True),
    }
    native.update(overrides)
    return native


TOOLS: Dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec(
            name="llvm",
            executable="clang",
            strategies=(SYSTEM, ARCHIVE),
            native={
                "apt": NativePackage(
                    ("clang-{major}", "lld-{major}", "llvm-{major}"),
                    default_names=("clang", "lld", "llvm"),
                    bin_dir="/usr/lib/llvm-{major}/bin",
                ),
                "brew": NativePackage(("llvm@{major}",), default_names=("llvm",)),
                "choco": NativePackage(
                    ("llvm",), pin=True, bin_dir="C:/Program Files/LLVM/bin"
                ),
            },
            locator=LLVMLocator,
            aliases=("clang", "clangtidy", "clangformat"),
        ),
        ToolSpec(
            name="gcc",
            executable="gcc",
            strategies=(SYSTEM,),
            native={
                "apt": NativePackage(
                    ("gcc-{major}", "g++-{major}"), default_names=("gcc", "g++")
                ),
                "dnf": NativePackage(("gcc", "gcc-c++"), any_version=True),
                "pacman": NativePackage(("gcc",), any_version=True),
                "brew": NativePackage(("gcc@{major}",), default_names=("gcc",)),
                "choco": NativePackage(
                    ("mingw",), pin=True, bin_dir="C:/ProgramData/mingw64/mingw64/bin"
                ),
            },
            aliases=("g++",),
        ),
        ToolSpec(
            name="cmake",
            executable="cmake",
            strategies=(SYSTEM, ARCHIVE, PIP),
            native=_everywhere(
                "cmake",
                choco=NativePackage(
                    ("cmake",), pin=True, bin_dir="C:/Program Files/CMake/bin"
                ),
            ),
            locator=CMakeLocator,
            pip_package="cmake",
        ),
        ToolSpec(
            name="ninja",
            executable="ninja",
            strategies=(SYSTEM, ARCHIVE, PIP),
            native=_everywhere(
                "ninja",
                apt=NativePackage(("ninja-build",)),
                dnf=NativePackage(("ninja-build",)),
            ),
            locator=NinjaLocator,
            pip_package="ninja",
        ),
        ToolSpec(name="meson", executable="meson", strategies=(PIP,), pip_package="meson"),
        ToolSpec(name="conan", executable="conan", strategies=(PIP,), pip_package="conan"),
        ToolSpec(name="gcovr", executable="gcovr", strategies=(PIP,), pip_package="gcovr"),
        ToolSpec(name="ccache", executable="ccache", strategies=(SYSTEM,), native=_everywhere("ccache")),
        ToolSpec(name="make", executable="make", strategies=(SYSTEM,), native=_everywhere("make")),
        ToolSpec(name="doxygen", executable="doxygen", strategies=(SYSTEM,), native=_everywhere("doxygen")),
        ToolSpec(
            name="cppcheck",
            executable="cppcheck",
            strategies=(SYSTEM,),
            native=_everywhere("cppcheck"),
        ),
    )
}

ALIASES: Dict[str, str] = {
    alias: spec.name for spec in TOOLS.values() for alias in spec.aliases
}


def canonical_name(tool: str) -> str:
    """Resolve an alias ('clangtidy') to the tool providing it ('llvm')."""
    return ALIASES.get(tool, tool)


def get_tool(tool: str) -> ToolSpec:
    """
    Look up a tool by name or alias.

    Raises:
        ConfigurationError: If the tool is unknown
    """
    spec = TOOLS.get(canonical_name(tool))
    if spec is None:
        raise ConfigurationError(
            f"Unknown tool '{tool}'. Supported tools: {', '.join(tool_names())}"
        )
    return spec


def tool_names() -> List[str]:
    """All accepted tool names, aliases included."""
    return sorted([*TOOLS, *ALIASES])
