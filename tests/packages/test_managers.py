"""
Unit tests for native package managers and their detection.
"""

from pathlib import Path

import pytest

from setupkit.core import process
from setupkit.core.exceptions import PackageManagerInstallError, PackageManagerNotFoundError
from setupkit.core.platform import PlatformInfo
from setupkit.packages import (
    AptManager,
    BrewManager,
    ChocoManager,
    DnfManager,
    PackageManagerDetector,
    PackageSpec,
    PacmanManager,
)


@pytest.fixture
def commands(monkeypatch):
    """Record run_command/run_elevated calls; every program is on PATH."""
    recorded = []

    def run(command, env=None, check=True, capture=False, timeout=None):
        recorded.append((list(command), env))
        return 0

    monkeypatch.setattr(process, "run_command", run)
    monkeypatch.setattr(process, "run_elevated", lambda command, env=None, check=True: run(command, env))
    monkeypatch.setattr(process, "which", lambda name: f"/usr/bin/{name}")
    return recorded


class TestPackageSpec:
    def test_empty_name(self):
        with pytest.raises(ValueError):
            PackageSpec("")

    def test_str(self):
        assert str(PackageSpec("cmake", "3.20.2")) == "cmake 3.20.2"


class TestInstallCommands:
    """Test per-manager command lines."""

    def test_apt(self):
        packages = [PackageSpec("clang-12"), PackageSpec("cmake", "3.16.3-1")]
        assert AptManager().install_command(packages) == [
            "apt-get", "install", "-y", "-q", "--fix-broken", "clang-12", "cmake=3.16.3-1",
        ]

    def test_dnf(self):
        assert DnfManager().install_command([PackageSpec("cmake", "3.20.2")]) == [
            "dnf", "-y", "install", "cmake-3.20.2",
        ]

    def test_pacman(self):
        assert PacmanManager().install_command([PackageSpec("ninja")]) == [
            "pacman", "-S", "--noconfirm", "--needed", "ninja",
        ]

    def test_brew(self):
        assert BrewManager("/opt/homebrew/bin/brew").install_command([PackageSpec("llvm@12")]) == [
            "/opt/homebrew/bin/brew", "install", "llvm@12",
        ]

    def test_choco_pins_version(self):
        assert ChocoManager().install_command([PackageSpec("llvm", "12.0.0")]) == [
            "choco", "install", "-y", "--no-progress", "llvm", "--version", "12.0.0",
        ]

    def test_choco_rejects_two_pins(self):
        with pytest.raises(PackageManagerInstallError):
            ChocoManager().install_command([PackageSpec("a", "1"), PackageSpec("b", "2")])


class TestInstall:
    """Test SystemPackageManager.install()."""

    def test_apt_updates_once(self, commands):
        manager = AptManager()

        manager.install([PackageSpec("ccache")])
        manager.install([PackageSpec("make")])

        assert [command for command, _ in commands] == [
            ["apt-get", "update", "-q"],
            ["apt-get", "install", "-y", "-q", "--fix-broken", "ccache"],
            ["apt-get", "install", "-y", "-q", "--fix-broken", "make"],
        ]
        assert commands[1][1] == {"DEBIAN_FRONTEND": "noninteractive"}

    def test_missing_manager(self, monkeypatch):
        monkeypatch.setattr(process, "which", lambda name: None)
        with pytest.raises(PackageManagerNotFoundError):
            DnfManager().install([PackageSpec("gcc")])

    def test_failure_is_wrapped(self, commands, monkeypatch):
        def fail(command, env=None, check=True):
            raise process.ProcessError(command, 100)

        monkeypatch.setattr(process, "run_elevated", fail)

        with pytest.raises(PackageManagerInstallError, match="apt failed"):
            AptManager().install([PackageSpec("clang-99")])

    def test_has_package(self, monkeypatch):
        monkeypatch.setattr(process, "run_command", lambda command, **kw: 0 if command[-1] == "cmake" else 100)

        assert AptManager().has_package("cmake")
        assert not AptManager().has_package("cmake-gui-9")

    def test_query_survives_missing_program(self, monkeypatch):
        def missing(command, **kwargs):
            raise FileNotFoundError(command[0])

        monkeypatch.setattr(process, "run_command", missing)
        assert not PacmanManager().has_package("gcc")

    def test_brew_bin_dir_from_prefix(self, monkeypatch):
        monkeypatch.setattr(process, "command_output", lambda command, timeout=30: "/opt/homebrew/opt/llvm@12")
        assert BrewManager().bin_dir(PackageSpec("llvm@12")) == Path("/opt/homebrew/opt/llvm@12/bin")


class TestDetector:
    """Test PackageManagerDetector."""

    @pytest.mark.parametrize(
        "platform, expected",
        [
            (PlatformInfo(os="linux", arch="x64", distribution_family="fedora"), "dnf"),
            (PlatformInfo(os="linux", arch="x64", distribution_family="arch"), "pacman"),
            (PlatformInfo(os="linux", arch="x64"), "apt"),
            (PlatformInfo(os="darwin", arch="arm64"), "brew"),
            (PlatformInfo(os="win32", arch="x64"), "choco"),
        ],
    )
    def test_family_order(self, platform, expected, commands):
        assert PackageManagerDetector().detect(platform).name == expected

    def test_first_available_wins(self, monkeypatch):
        monkeypatch.setattr(process, "which", lambda name: "/usr/bin/pacman" if name == "pacman" else None)
        platform = PlatformInfo(os="linux", arch="x64", distribution_family="debian")

        assert PackageManagerDetector().detect(platform).name == "pacman"

    def test_nothing_available(self, monkeypatch):
        monkeypatch.setattr(process, "which", lambda name: None)
        assert PackageManagerDetector().detect(PlatformInfo(os="linux", arch="x64")) is None
