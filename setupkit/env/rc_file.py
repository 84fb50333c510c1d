"""
Shell rc file maintenance.

Variables persisted by Environment land in an rc file (~/.cpprc by default).
source_rc() hooks that file into ~/.profile and ~/.bashrc so login and
interactive shells pick it up; finalize_rc() removes the duplicate lines that
repeated runs append.
"""

import functools
import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

RC_HEADER = "# Automatically Generated by setupkit\nexport SOURCE_CPPRC=0"


def source_line(rc_file: Path) -> str:
    """Snippet sourcing the rc file unless SOURCE_CPPRC=0."""
    return (
        "\n# source .cpprc if SOURCE_CPPRC is not set to 0\n"
        f'if [[ "$SOURCE_CPPRC" != 0 && -f "{rc_file}" ]]; then source "{rc_file}"; fi\n'
    )


def source_rc(rc_file: Union[str, Path], home: Union[str, Path, None] = None) -> None:
    """
    Make future shells source the rc file.

    Runs once per (rc_file, home) pair for the lifetime of the process.
    Failures are logged, never raised.
    """
    rc_file = Path(rc_file).expanduser().resolve()
    home = Path(home) if home is not None else Path.home()
    _source_rc(rc_file, home)


@functools.lru_cache(maxsize=None)
def _source_rc(rc_file: Path, home: Path) -> None:
    snippet = source_line(rc_file)
    try:
        _add_rc_header(rc_file)
        for profile in (home / ".profile", home / ".bashrc"):
            _append_once(profile, snippet)
    except OSError as e:
        logger.warning(
            f"Failed to add {snippet.strip()} to .profile or .bashrc. "
            f"You should add it manually: {e}"
        )


def _add_rc_header(rc_file: Path) -> None:
    # SOURCE_CPPRC=0 stops .profile/.bashrc from sourcing the file recursively
    if rc_file.exists() and RC_HEADER not in rc_file.read_text(encoding="utf-8"):
        with open(rc_file, "a", encoding="utf-8") as f:
            f.write(f"\n{RC_HEADER}\n")
        logger.info(f"Added setupkit header to {rc_file}")


def _append_once(profile: Path, snippet: str) -> None:
    if not profile.exists():
        return
    if snippet in profile.read_text(encoding="utf-8"):
        return
    with open(profile, "a", encoding="utf-8") as f:
        f.write(snippet)
    logger.info(f"Made {profile} source the setupkit rc file")


def finalize_rc(rc_file: Union[str, Path]) -> None:
    """
    Remove duplicate lines from the rc file, keeping the last occurrence.

    Blank lines count as duplicates too, so the result has no runs of empty
    lines.
    """
    rc_file = Path(rc_file).expanduser()
    if not rc_file.exists():
        return

    lines = rc_file.read_text(encoding="utf-8").split("\n")
    seen = set()
    unique = []
    for line in reversed(lines):
        if line in seen:
            continue
        seen.add(line)
        unique.append(line)
    rc_file.write_text("\n".join(reversed(unique)), encoding="utf-8")
    logger.debug(f"Finalized {rc_file}")


def clear_source_cache() -> None:
    """Forget which rc files were already hooked up (for tests)."""
    _source_rc.cache_clear()
