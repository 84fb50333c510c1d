"""
Unit tests for the native package manager strategy.
"""

import asyncio
from pathlib import Path

import pytest

from setupkit.core import process
from setupkit.core.exceptions import PackageManagerInstallError, StrategyUnavailable
from setupkit.packages.apt import AptManager
from setupkit.packages.base import PackageSpec
from setupkit.strategies.base import Failed, InstallRequest, Unavailable
from setupkit.strategies.system import NativePackage, SystemStrategy

LLVM_APT = NativePackage(
    names=("clang-{major}", "llvm-{major}"),
    default_names=("clang", "llvm"),
    bin_dir="/usr/lib/llvm-{major}/bin",
)


def make_request(platform, version, tool="llvm", executable="clang"):
    return InstallRequest(tool, version, "x64", platform, executable)


class TestNativePackage:
    """Test NativePackage.packages()."""

    def test_templated(self):
        assert LLVM_APT.packages("12.0.1") == [PackageSpec("clang-12"), PackageSpec("llvm-12")]

    def test_default_names(self):
        assert LLVM_APT.packages("") == [PackageSpec("clang"), PackageSpec("llvm")]

    def test_templated_without_default(self):
        with pytest.raises(StrategyUnavailable):
            NativePackage(names=("gcc-{major}",)).packages("")

    def test_pinned(self):
        assert NativePackage(names=("cmake",), pin=True).packages("3.20.2") == [
            PackageSpec("cmake", "3.20.2")
        ]

    def test_any_version(self, caplog):
        packages = NativePackage(names=("gcc",), any_version=True).packages("11")
        assert packages == [PackageSpec("gcc")]
        assert "not 11" in caplog.text

    def test_unpinned_with_version(self):
        with pytest.raises(StrategyUnavailable, match="3.20.2"):
            NativePackage(names=("cmake",)).packages("3.20.2")

    def test_bin_dir(self):
        assert LLVM_APT.resolve_bin_dir("12") == Path("/usr/lib/llvm-12/bin")
        assert LLVM_APT.resolve_bin_dir("") is None
        assert NativePackage(names=("ninja",)).resolve_bin_dir("1.10") is None


class TestSystemStrategy:
    """Test SystemStrategy.attempt()."""

    def test_installs_templated_packages(self, ubuntu_22, fake_apt):
        manager = fake_apt("clang-12", "llvm-12")
        strategy = SystemStrategy({"apt": LLVM_APT}, manager)

        outcome = asyncio.run(strategy.attempt(make_request(ubuntu_22, "12")))

        assert outcome.bin_dir == Path("/usr/lib/llvm-12/bin")
        assert manager.installed == [[PackageSpec("clang-12"), PackageSpec("llvm-12")]]

    def test_default_bin_dir_from_manager(self, ubuntu_22, fake_apt):
        manager = fake_apt("ccache", bin_dir="/usr/local/bin")
        strategy = SystemStrategy({"apt": NativePackage(names=("ccache",))}, manager)

        outcome = asyncio.run(strategy.attempt(make_request(ubuntu_22, "", "ccache", "ccache")))

        assert outcome.bin_dir == Path("/usr/local/bin")

    def test_no_manager(self, ubuntu_22):
        outcome = asyncio.run(SystemStrategy({"apt": LLVM_APT}, None).attempt(make_request(ubuntu_22, "12")))
        assert isinstance(outcome, Unavailable)

    def test_not_packaged_for_manager(self, ubuntu_22, fake_apt):
        strategy = SystemStrategy({"brew": NativePackage(names=("llvm@{major}",))}, fake_apt())
        outcome = asyncio.run(strategy.attempt(make_request(ubuntu_22, "12")))
        assert outcome == Unavailable("llvm is not packaged for apt")

    def test_missing_package_is_unavailable(self, ubuntu_22, fake_apt):
        """Test a version the repository lacks is skipped, not failed."""
        manager = fake_apt("clang-12")
        outcome = asyncio.run(SystemStrategy({"apt": LLVM_APT}, manager).attempt(make_request(ubuntu_22, "12")))

        assert outcome == Unavailable("apt has no package llvm-12")
        assert manager.installed == []

    def test_install_error_is_failure(self, ubuntu_22, fake_apt):
        manager = fake_apt("clang-12", "llvm-12", fail=True)
        outcome = asyncio.run(SystemStrategy({"apt": LLVM_APT}, manager).attempt(make_request(ubuntu_22, "12")))

        assert isinstance(outcome, Failed)
        assert isinstance(outcome.cause, PackageManagerInstallError)

    def test_index_refreshed_before_query(self, ubuntu_22, monkeypatch):
        """Test apt's index is updated before packages are looked up."""
        commands = []

        def run(command, env=None, check=True, capture=False, timeout=None):
            commands.append(" ".join(command[:2]))
            return 0

        monkeypatch.setattr(process, "run_command", run)
        monkeypatch.setattr(process, "run_elevated", lambda command, env=None, check=True: run(command))
        monkeypatch.setattr(process, "which", lambda name: f"/usr/bin/{name}")
        gcc_apt = NativePackage(names=("gcc-{major}", "g++-{major}"))

        outcome = asyncio.run(
            SystemStrategy({"apt": gcc_apt}, AptManager()).attempt(
                make_request(ubuntu_22, "11", "gcc", "gcc")
            )
        )

        assert outcome.bin_dir == Path("/usr/bin")
        assert commands == [
            "apt-get update",
            "apt-cache show",
            "apt-cache show",
            "apt-get install",
        ]
