"""Running external programs for Presskit.

The site generator, rsync and git are all invoked by name through
``run_command``. Programs are looked up on PATH first and then in the
project's ``bin/`` directory (binstubs).

Functions:
    find_executable: Locate an executable in PATH or the project's bin/.
    run_command: Run a program and return its output.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from .errors import CommandFailed

logger = logging.getLogger(__name__)


def find_executable(name: str, project_root: Path | None = None) -> str | None:
    """Find an executable in PATH or the project's local bin/ directory.

    Args:
        name: Name of the executable to find (e.g., 'jekyll', 'rsync').
        project_root: Optional project root to search for a local binstub.

    Returns:
        Full path to the executable if found, None otherwise.

    Examples:
        >>> find_executable('git')
        '/usr/bin/git'

        >>> find_executable('jekyll', Path('/my/site'))  # With local lookup
        '/my/site/bin/jekyll'
    """
    found = shutil.which(name)
    if found:
        return found

    if project_root is not None:
        local = project_root / "bin" / name
        if local.exists():
            return str(local)

    return None


def run_command(
    args: list[str], cwd: Path | None = None, capture: bool = True
) -> str:
    """Run an external program and return its stdout.

    Args:
        args: Program name followed by its arguments.
        cwd: Working directory; also searched for a bin/ binstub.
        capture: Capture output instead of passing it through to the
            terminal. Long-running programs such as a preview server
            should not be captured.

    Returns:
        Captured standard output, or an empty string when not capturing.

    Raises:
        CommandFailed: If the program cannot be found or exits non-zero.
    """
    executable = find_executable(args[0], cwd)
    if executable is None:
        raise CommandFailed(args, None)

    logger.info("Running %s", " ".join(args))
    result = subprocess.run(
        [executable, *args[1:]],
        cwd=cwd,
        capture_output=capture,
        text=True,
    )
    if result.returncode != 0:
        raise CommandFailed(args, result.returncode, (result.stderr or "").strip())
    return result.stdout or ""
