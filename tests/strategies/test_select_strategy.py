"""
Unit tests for strategy outcomes and selection.
"""

import asyncio
from pathlib import Path

import pytest

from setupkit.core.exceptions import AllStrategiesExhausted, StrategyUnavailable
from setupkit.strategies.base import (
    Failed,
    Installed,
    InstallRequest,
    InstallStrategy,
    Unavailable,
    select_strategy,
)


class ScriptedStrategy(InstallStrategy):
    """Strategy returning or raising a fixed result."""

    def __init__(self, name, result):
        self.name = name
        self.result = result
        self.calls = 0

    async def install(self, request):
        self.calls += 1
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


@pytest.fixture
def request_(ubuntu_22):
    return InstallRequest("llvm", "12", "x64", ubuntu_22, "clang")


class TestAttempt:
    """Test InstallStrategy.attempt() classification."""

    def test_installed(self, request_):
        outcome = asyncio.run(ScriptedStrategy("archive", Path("/opt/bin")).attempt(request_))
        assert outcome == Installed(Path("/opt/bin"), "archive")
        assert outcome.kind == "installed"

    def test_unavailable(self, request_):
        strategy = ScriptedStrategy("system", StrategyUnavailable("no apt"))
        outcome = asyncio.run(strategy.attempt(request_))
        assert outcome == Unavailable("no apt")

    def test_failed(self, request_):
        error = OSError("disk full")
        outcome = asyncio.run(ScriptedStrategy("archive", error).attempt(request_))
        assert isinstance(outcome, Failed)
        assert outcome.cause is error


class TestSelectStrategy:
    """Test select_strategy()."""

    def test_falls_through_unavailable(self, request_):
        """Test an unavailable strategy is skipped without surfacing an error."""
        system = ScriptedStrategy("system", StrategyUnavailable("no package"))
        archive = ScriptedStrategy("archive", Path("/opt/llvm/bin"))

        outcome = asyncio.run(select_strategy([system, archive], request_))

        assert outcome.bin_dir == Path("/opt/llvm/bin")
        assert outcome.strategy == "archive"

    def test_stops_at_first_success(self, request_):
        first = ScriptedStrategy("system", Path("/usr/bin"))
        second = ScriptedStrategy("archive", Path("/opt/bin"))

        asyncio.run(select_strategy([first, second], request_))

        assert second.calls == 0

    def test_failure_then_success(self, request_):
        failing = ScriptedStrategy("system", RuntimeError("apt broke"))
        archive = ScriptedStrategy("archive", Path("/opt/bin"))

        assert asyncio.run(select_strategy([failing, archive], request_)).strategy == "archive"

    def test_exhausted_aggregates_causes(self, request_):
        """Test the error names the tool, version and every cause."""
        error = RuntimeError("download failed")
        strategies = [
            ScriptedStrategy("system", StrategyUnavailable("no package clang-12")),
            ScriptedStrategy("archive", error),
        ]

        with pytest.raises(AllStrategiesExhausted) as info:
            asyncio.run(select_strategy(strategies, request_))

        message = str(info.value)
        assert "llvm 12" in message
        assert "system: no package clang-12" in message
        assert "archive: download failed" in message
        assert info.value.causes == [
            ("system", "no package clang-12"),
            ("archive", "download failed"),
        ]
        assert info.value.__cause__ is error

    def test_no_strategies(self, request_):
        with pytest.raises(AllStrategiesExhausted, match="no installation strategy"):
            asyncio.run(select_strategy([], request_))
