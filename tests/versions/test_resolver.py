"""
Unit tests for version resolution.
"""

import pytest

from setupkit.config.defaults import DefaultVersionTable
from setupkit.versions.resolver import (
    VersionRequest,
    VersionResolver,
    default_linux_version,
    is_version_default,
    sync_versions,
)


@pytest.fixture
def resolver():
    table = DefaultVersionTable(
        versions={"gcc": "11", "llvm": "12"},
        linux_versions={"gcc": {20: "10", 22: "11"}},
    )
    return VersionResolver(table)


class TestResolve:
    """Test VersionResolver.resolve()."""

    @pytest.mark.parametrize(
        "release, expected",
        [
            ((22, 4), "11"),
            ((21, 10), "10"),
            ((20, 4), "10"),
            ((24, 4), "11"),
            ((18, 4), ""),
        ],
    )
    def test_linux_release_table(self, resolver, release, expected):
        """Test the largest key <= the OS major version wins."""
        request = VersionRequest("gcc", "true", "linux", release)
        assert resolver.resolve(request) == expected

    @pytest.mark.parametrize("requested", [None, "true", "default"])
    def test_default_sentinels(self, resolver, requested):
        request = VersionRequest("gcc", requested, "linux", (22, 4))
        assert resolver.resolve(request) == "11"

    def test_non_linux_uses_plain_default(self, resolver):
        request = VersionRequest("gcc", None, "darwin", (13, 4))
        assert resolver.resolve(request) == "11"

    def test_linux_without_release_uses_plain_default(self, resolver):
        """Test non-Ubuntu hosts (no release) skip the release table."""
        request = VersionRequest("gcc", None, "linux", None)
        assert resolver.resolve(request) == "11"

    def test_explicit_version_unchanged(self, resolver):
        request = VersionRequest("gcc", "9.4.0", "linux", (22, 4))
        assert resolver.resolve(request) == "9.4.0"

    def test_unknown_tool_default_is_empty(self, resolver):
        request = VersionRequest("ccache", "true", "linux", (22, 4))
        assert resolver.resolve(request) == ""


class TestHelpers:
    """Test module-level helpers."""

    def test_is_version_default(self):
        assert is_version_default(None)
        assert is_version_default("true")
        assert is_version_default("default")
        assert not is_version_default("12")

    def test_default_linux_version(self):
        assert default_linux_version((23, 10), {20: "10", 22: "11"}) == "11"
        assert default_linux_version((19, 10), {20: "10"}) == ""


class TestSyncVersions:
    """Test sync_versions()."""

    def test_one_explicit_version_is_shared(self):
        options = {"llvm": "12", "clangtidy": "true", "clangformat": None}

        assert sync_versions(options, ["llvm", "clangtidy", "clangformat"])
        assert options == {"llvm": "12", "clangtidy": "12", "clangformat": None}

    def test_all_defaults(self):
        options = {"llvm": "true", "clangformat": "default"}

        assert sync_versions(options, ["llvm", "clangtidy", "clangformat"])
        assert options == {"llvm": "true", "clangformat": "true"}

    def test_conflict_leaves_options_untouched(self):
        options = {"llvm": "12", "clangtidy": "11"}

        assert not sync_versions(options, ["llvm", "clangtidy"])
        assert options == {"llvm": "12", "clangtidy": "11"}
