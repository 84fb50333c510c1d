"""
Unit tests for tool activation.
"""

from pathlib import Path

import pytest

from setupkit.core import process
from setupkit.env.activator import EnvironmentActivator
from setupkit.env.environment import Environment


@pytest.fixture
def elevated_commands(monkeypatch):
    commands = []

    def run_elevated(command, env=None, check=True):
        commands.append(list(command))
        return 0

    monkeypatch.setattr(process, "run_elevated", run_elevated)
    return commands


def make_activator(platform, environ):
    environment = Environment(persist=False, environ=environ, platform=platform.os)
    return EnvironmentActivator(environment, platform)


class TestActivateLLVM:
    """Test activation of an LLVM installation."""

    def test_compiler_environment(self, ubuntu_22, environ, elevated_commands):
        activator = make_activator(ubuntu_22, environ)

        assert activator.activate("llvm", Path("/opt/llvm/bin"))

        assert environ["PATH"].startswith("/opt/llvm/bin:")
        assert environ["LLVM_PATH"] == "/opt/llvm"
        assert environ["LD_LIBRARY_PATH"] == "/opt/llvm/lib"
        assert environ["DYLD_LIBRARY_PATH"] == "/opt/llvm/lib"
        assert environ["CC"] == "/opt/llvm/bin/clang"
        assert environ["CXX"] == "/opt/llvm/bin/clang++"
        assert environ["LDFLAGS"] == "-L/opt/llvm/lib"
        assert environ["CPPFLAGS"] == "-I/opt/llvm/include"
        assert elevated_commands == [
            ["update-alternatives", "--install", "/usr/bin/cc", "cc", "/opt/llvm/bin/clang", "40"],
            ["update-alternatives", "--install", "/usr/bin/c++", "c++", "/opt/llvm/bin/clang++", "40"],
        ]

    def test_shared_bin_dir_is_not_a_prefix(self, ubuntu_22, environ, elevated_commands):
        """Test a distribution clang in /usr/bin only selects the compilers."""
        activator = make_activator(ubuntu_22, environ)

        assert activator.activate("llvm", Path("/usr/bin"))

        assert environ["CC"] == "/usr/bin/clang"
        assert environ["CXX"] == "/usr/bin/clang++"
        for variable in ("LLVM_PATH", "LD_LIBRARY_PATH", "LDFLAGS", "CPPFLAGS"):
            assert variable not in environ
        assert len(elevated_commands) == 2

    def test_activation_is_idempotent(self, ubuntu_22, environ, elevated_commands):
        activator = make_activator(ubuntu_22, environ)

        activator.activate("llvm", "/opt/llvm/bin")
        once = dict(environ)
        activator.activate("llvm", "/opt/llvm/bin")

        assert environ == once

    def test_failed_step_is_recorded_not_raised(self, ubuntu_22, environ, monkeypatch, caplog):
        """Test a failing update-alternatives leaves the other effects in place."""

        def fail(command, env=None, check=True):
            raise process.ProcessError(command, 2)

        monkeypatch.setattr(process, "run_elevated", fail)
        activator = make_activator(ubuntu_22, environ)

        assert not activator.activate("llvm", Path("/opt/llvm/bin"))

        assert activator.failures == ["register clang alternatives"]
        assert environ["CC"] == "/opt/llvm/bin/clang"
        assert "register clang alternatives" in caplog.text

    def test_macos_sdkroot(self, macos, environ, elevated_commands, monkeypatch):
        monkeypatch.setattr(process, "command_output", lambda command, timeout=30: "/Library/SDKs/MacOSX.sdk")
        activator = make_activator(macos, environ)

        assert activator.activate("llvm", Path("/opt/llvm/bin"))

        assert environ["SDKROOT"] == "/Library/SDKs/MacOSX.sdk"
        assert elevated_commands == []


class TestActivateGCC:
    """Test activation of a GCC installation."""

    def test_versioned_executables(self, tmp_path, ubuntu_22, environ, elevated_commands):
        (tmp_path / "gcc-11").write_text("")
        (tmp_path / "g++-11").write_text("")
        activator = make_activator(ubuntu_22, environ)

        assert activator.activate("gcc", tmp_path, "11")

        assert environ["CC"] == str(tmp_path / "gcc-11")
        assert environ["CXX"] == str(tmp_path / "g++-11")
        assert [command[3] for command in elevated_commands] == ["cc", "c++", "gcc", "g++"]

    def test_unversioned_fallback(self, tmp_path, ubuntu_22, environ, elevated_commands):
        activator = make_activator(ubuntu_22, environ)

        activator.activate("gcc", tmp_path, "11")

        assert environ["CC"] == str(tmp_path / "gcc")
        assert [command[3] for command in elevated_commands] == ["cc", "c++"]


class TestOtherTools:
    """Test tools that only need PATH."""

    def test_path_only(self, environ, elevated_commands, ubuntu_22):
        activator = make_activator(ubuntu_22, environ)

        assert activator.activate("cmake", "/opt/cmake/bin")

        assert environ == {"PATH": "/opt/cmake/bin:/usr/bin:/bin"}
        assert elevated_commands == []
