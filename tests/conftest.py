"""
Pytest configuration and shared fixtures for SetupKit tests.
"""

import logging
from pathlib import Path
from typing import Dict, List

import pytest

from setupkit.core.platform import PlatformInfo, clear_platform_cache
from setupkit.env.rc_file import clear_source_cache
from setupkit.packages.base import PackageSpec, SystemPackageManager
from setupkit.tools.brew import clear_brew_cache


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_process_caches():
    """Forget process-wide memoized state between tests."""
    yield
    clear_platform_cache()
    clear_source_cache()
    clear_brew_cache()
    logging.getLogger("setupkit").setLevel(logging.NOTSET)


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))
    monkeypatch.delenv("SETUPKIT_DIR", raising=False)
    monkeypatch.delenv("SETUPKIT_RC_FILE", raising=False)
    monkeypatch.delenv("SETUPKIT_NO_PERSIST", raising=False)

    return fake_home


@pytest.fixture
def ubuntu_22() -> PlatformInfo:
    return PlatformInfo(
        os="linux",
        arch="x64",
        os_version="22.04",
        distribution="ubuntu",
        distribution_family="debian",
        os_release=(22, 4),
    )


@pytest.fixture
def macos() -> PlatformInfo:
    return PlatformInfo(os="darwin", arch="x64", os_version="13.4", os_release=(13, 4))


class FakePackageManager(SystemPackageManager):
    """In-memory package manager recording what it was asked to install."""

    name = "apt"
    executable = "apt-get"

    def __init__(self, available: List[str], fail: bool = False, bin_dir: str = "/usr/bin"):
        super().__init__()
        self.available = set(available)
        self.fail = fail
        self.installed: List[List[PackageSpec]] = []
        self.default_bin_dir = Path(bin_dir)

    def is_available(self) -> bool:
        return True

    def has_package(self, name: str) -> bool:
        return name in self.available

    def install_command(self, packages):
        return ["true"]

    def install(self, packages) -> None:
        from setupkit.core.exceptions import PackageManagerInstallError

        if self.fail:
            raise PackageManagerInstallError("apt failed: exit code 100")
        self.installed.append(list(packages))


@pytest.fixture
def fake_apt():
    """Factory for FakePackageManager instances."""

    def make(*available: str, **kwargs) -> FakePackageManager:
        return FakePackageManager(list(available), **kwargs)

    return make


@pytest.fixture
def reachable_urls():
    """Existence probe confirming only the URLs added to the returned set."""

    class Probe:
        def __init__(self):
            self.urls = set()
            self.calls: List[str] = []

        def __call__(self, url: str) -> bool:
            self.calls.append(url)
            return url in self.urls

    return Probe()


@pytest.fixture
def environ() -> Dict[str, str]:
    return {"PATH": "/usr/bin:/bin"}
