"""
Unit tests for filesystem module.
"""

import io
import os
import tarfile
import zipfile

import pytest

from setupkit.core.filesystem import (
    InsecureArchiveError,
    UnsupportedArchiveFormat,
    add_exe_ext,
    extract_archive,
    find_executable,
    safe_rmtree,
)


def _make_tar(path, files):
    with tarfile.open(path, "w:gz") as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(data))
    return path


def _make_zip(path, files):
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    return path


class TestExtractArchive:
    """Test extract_archive()."""

    def test_extract_tar_keeps_top_level_dir(self, tmp_path):
        """Test plain extraction keeps the archive layout."""
        archive = _make_tar(
            tmp_path / "cmake-3.20.2-linux-x86_64.tar.gz",
            {"cmake-3.20.2-linux-x86_64/bin/cmake": b"#!/bin/sh\n"},
        )

        dest = extract_archive(archive, tmp_path / "out")

        assert (dest / "cmake-3.20.2-linux-x86_64" / "bin" / "cmake").is_file()

    def test_extract_tar_strips_top_level_dir(self, tmp_path):
        """Test strip_components=1 removes the single top-level directory."""
        archive = _make_tar(
            tmp_path / "clang+llvm-12.0.0.tar.gz",
            {
                "clang+llvm-12.0.0/bin/clang": b"clang",
                "clang+llvm-12.0.0/lib/libc++.a": b"lib",
            },
        )

        dest = extract_archive(archive, tmp_path / "llvm", strip_components=1)

        assert (dest / "bin" / "clang").read_bytes() == b"clang"
        assert (dest / "lib" / "libc++.a").is_file()
        # staging directory is cleaned up
        assert [p.name for p in tmp_path.iterdir() if p.name.startswith(".extract-")] == []

    def test_extract_zip(self, tmp_path):
        """Test zip extraction."""
        archive = _make_zip(tmp_path / "ninja-linux.zip", {"ninja": b"elf"})

        dest = extract_archive(archive, tmp_path / "ninja")

        assert (dest / "ninja").read_bytes() == b"elf"
        if os.name != "nt":
            assert os.access(dest / "ninja", os.X_OK)

    def test_rejects_path_traversal(self, tmp_path):
        """Test members escaping the destination are blocked."""
        archive = _make_zip(tmp_path / "evil.zip", {"../evil": b"x"})

        with pytest.raises(InsecureArchiveError):
            extract_archive(archive, tmp_path / "out")

    def test_unsupported_format(self, tmp_path):
        """Test unknown extensions are rejected."""
        archive = tmp_path / "tool.rar"
        archive.write_bytes(b"rar")

        with pytest.raises(UnsupportedArchiveFormat):
            extract_archive(archive, tmp_path / "out")

    def test_invalid_strip_components(self, tmp_path):
        """Test only 0 and 1 are accepted."""
        archive = _make_zip(tmp_path / "a.zip", {"a": b""})

        with pytest.raises(ValueError):
            extract_archive(archive, tmp_path / "out", strip_components=2)


class TestExecutables:
    """Test add_exe_ext() and find_executable()."""

    def test_add_exe_ext(self):
        """Test .exe is added only on Windows."""
        assert add_exe_ext("clang", "win32") == "clang.exe"
        assert add_exe_ext("clang.exe", "win32") == "clang.exe"
        assert add_exe_ext("clang", "linux") == "clang"

    def test_find_executable_in_order(self, tmp_path):
        """Test the first directory holding the executable wins."""
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        (second / "meson").write_text("")

        assert find_executable("meson", [first, second]) == second / "meson"
        assert find_executable("conan", [first, second]) is None


class TestSafeRmtree:
    """Test safe_rmtree()."""

    def test_refuses_path_outside_prefix(self, tmp_path):
        """Test require_prefix guards deletion."""
        target = tmp_path / "outside"
        target.mkdir()

        with pytest.raises(ValueError):
            safe_rmtree(target, require_prefix=tmp_path / "setupkit")

        assert target.exists()
