"""
Change detection — has anything a service builds from changed in git?

Compares ``git diff --name-only --relative <ref>`` against the paths a
closure reads from.  git runs from the project root, and ``--relative``
keeps its output relative to that directory even when the project sits
below the top of the repository.

Used by ``buildbox build --check <ref>`` to skip builds whose inputs
are untouched.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from buildbox.core.errors import ChangeDetectionError

logger = logging.getLogger(__name__)


def run_git(
    *args: str,
    cwd: Path,
    timeout: int = 15,
) -> subprocess.CompletedProcess[str]:
    """Run a git command and return the result."""
    return subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def changed_files(base_ref: str, cwd: Path) -> list[str]:
    """Files under ``cwd`` that differ between ``base_ref`` and the working tree.

    Paths are relative to ``cwd``, not to the top of the repository.

    Raises:
        ChangeDetectionError: git is missing, timed out, or exited non-zero.
    """
    try:
        result = run_git("diff", "--name-only", "--relative", base_ref, cwd=cwd)
    except FileNotFoundError as e:
        raise ChangeDetectionError("git not found on PATH") from e
    except subprocess.TimeoutExpired as e:
        raise ChangeDetectionError(f"git diff against '{base_ref}' timed out") from e

    if result.returncode != 0:
        raise ChangeDetectionError(
            result.stderr.strip() or f"git diff against '{base_ref}' failed"
        )

    files = [line.strip() for line in result.stdout.splitlines() if line.strip()]
    logger.debug("%d files changed since %s", len(files), base_ref)
    return files


def any_paths_changed(changed: Iterable[str], watched: Iterable[Path]) -> bool:
    """True if any changed file is one of, or lies under, a watched path.

    Matching is by whole path components: a change to ``testdir2/a.txt``
    does not count as a change under ``testdir``.
    """
    watched_parts = [PurePosixPath(Path(p).as_posix()).parts for p in watched]
    for name in changed:
        parts = PurePosixPath(name).parts
        for prefix in watched_parts:
            if parts[: len(prefix)] == prefix:
                return True
    return False
