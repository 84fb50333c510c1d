"""
Unit tests for rc file maintenance.
"""

from setupkit.env.rc_file import (
    RC_HEADER,
    clear_source_cache,
    finalize_rc,
    source_line,
    source_rc,
)


class TestSourceRc:
    """Test source_rc()."""

    def test_hooks_existing_profiles(self, tmp_path):
        home = tmp_path / "home"
        home.mkdir()
        (home / ".bashrc").write_text("alias ll='ls -l'\n")
        rc_file = home / ".cpprc"
        rc_file.write_text('export CC="clang"\n')

        source_rc(rc_file, home)

        assert source_line(rc_file.resolve()) in (home / ".bashrc").read_text()
        assert not (home / ".profile").exists()
        assert RC_HEADER in rc_file.read_text()

    def test_snippet_added_once(self, tmp_path):
        home = tmp_path / "home"
        home.mkdir()
        profile = home / ".profile"
        profile.write_text("")
        rc_file = home / ".cpprc"

        source_rc(rc_file, home)
        clear_source_cache()
        source_rc(rc_file, home)

        assert profile.read_text().count(source_line(rc_file.resolve())) == 1

    def test_missing_rc_file_gets_no_header(self, tmp_path):
        source_rc(tmp_path / ".cpprc", tmp_path)
        assert not (tmp_path / ".cpprc").exists()


class TestFinalizeRc:
    """Test finalize_rc()."""

    def test_keeps_last_occurrence(self, tmp_path):
        rc_file = tmp_path / ".cpprc"
        rc_file.write_text(
            '\nexport PATH="/a:$PATH"\n\nexport CC="gcc"\n\nexport PATH="/a:$PATH"\n'
        )

        finalize_rc(rc_file)

        assert rc_file.read_text() == 'export CC="gcc"\nexport PATH="/a:$PATH"\n'

    def test_missing_file(self, tmp_path):
        finalize_rc(tmp_path / "missing")
        assert not (tmp_path / "missing").exists()
