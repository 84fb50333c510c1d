"""
Installation strategies.

A tool can usually be installed more than one way: with the native package
manager, by downloading a released archive, or with pip. Each way is an
InstallStrategy. The strategies for a tool are tried in priority order and the
first one that installs the tool wins.

Every attempt ends in one of three outcomes:

- Installed: the tool is installed, stop here
- Unavailable: the strategy cannot be used on this host, try the next one
- Failed: the strategy was tried and errored, log it and try the next one

Only when every strategy is used up does the request fail, with an
AllStrategiesExhausted error listing what each strategy reported.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, List, Optional, Sequence, Tuple, Union

from setupkit.core.exceptions import AllStrategiesExhausted, StrategyUnavailable
from setupkit.core.platform import PlatformInfo

logger = logging.getLogger(__name__)


# =============================================================================
# Request
# =============================================================================


@dataclass(frozen=True)
class InstallRequest:
    """
    One resolved installation request.

    Attributes:
        tool: Tool name (aliases already resolved)
        version: Concrete version; "" lets the strategy choose
        arch: Target architecture ('x64', 'arm64', ...)
        platform: Host platform
        executable: Main executable of the tool, without extension
    """

    tool: str
    version: str
    arch: str
    platform: PlatformInfo
    executable: str

    def describe(self) -> str:
        return f"{self.tool} {self.version or '(default)'} [{self.arch}]"


# =============================================================================
# Outcomes
# =============================================================================


@dataclass(frozen=True)
class Installed:
    """The tool is installed; bin_dir holds its executables."""

    kind: ClassVar[str] = "installed"

    bin_dir: Path
    strategy: str = ""


@dataclass(frozen=True)
class Unavailable:
    """The strategy cannot be used for this request."""

    kind: ClassVar[str] = "unavailable"

    reason: str = ""


@dataclass(frozen=True)
class Failed:
    """The strategy was attempted and raised cause."""

    kind: ClassVar[str] = "failed"

    cause: BaseException


StrategyOutcome = Union[Installed, Unavailable, Failed]


# =============================================================================
# Strategy
# =============================================================================


class InstallStrategy(ABC):
    """
    Base class for installation strategies.

    Subclasses implement install(), returning the bin directory or raising
    StrategyUnavailable when they do not apply. Any other exception counts as
    a failed attempt.
    """

    name: str = ""

    @abstractmethod
    async def install(self, request: InstallRequest) -> Path:
        """
        Install the requested tool.

        Returns:
            Directory holding the tool's executables

        Raises:
            StrategyUnavailable: If the strategy cannot serve the request
        """

    async def attempt(self, request: InstallRequest) -> StrategyOutcome:
        """Run install() and classify how it ended."""
        try:
            bin_dir = await self.install(request)
        except StrategyUnavailable as e:
            logger.debug(f"{self.name}: unavailable for {request.describe()}: {e}")
            return Unavailable(str(e))
        except Exception as e:
            logger.error(f"{self.name}: failed to install {request.describe()}: {e}")
            return Failed(e)

        logger.debug(f"{self.name}: installed {request.describe()} into {bin_dir}")
        return Installed(Path(bin_dir), self.name)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


async def select_strategy(
    strategies: Sequence[InstallStrategy], request: InstallRequest
) -> Installed:
    """
    Try strategies in order and stop at the first that installs the tool.

    Args:
        strategies: Strategies in priority order
        request: What to install

    Returns:
        The Installed outcome of the winning strategy

    Raises:
        AllStrategiesExhausted: If no strategy installed the tool
    """
    causes: List[Tuple[str, str]] = []
    last_error: Optional[BaseException] = None

    for strategy in strategies:
        outcome = await strategy.attempt(request)
        if isinstance(outcome, Installed):
            if causes:
                logger.debug(
                    f"{request.tool}: installed with {strategy.name} after "
                    f"{', '.join(name for name, _ in causes)}"
                )
            return outcome
        if isinstance(outcome, Failed):
            causes.append((strategy.name, str(outcome.cause)))
            last_error = outcome.cause
        else:
            causes.append((strategy.name, outcome.reason or "unavailable"))

    raise AllStrategiesExhausted(request.tool, request.version, causes) from last_error
