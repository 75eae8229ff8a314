"""Read-only Git queries used to gather context for a commit message."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional, Union

from .exceptions import ProcessError

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_COUNT = 10

PathLike = Union[str, Path]

# `git log` exits non-zero on a branch with no commits; that is just an
# empty history.
_UNBORN_BRANCH_MARKERS = (
    "does not have any commits yet",
    "bad default revision 'HEAD'",
)


def _run_git_command(project_root: PathLike, args: list[str]) -> str:
    """Run ``git -C <project_root> <args>`` and return raw stdout."""
    command = ["git", "-C", str(project_root)] + args
    logger.debug("Running %s", " ".join(command))
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=True,
        )
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise ProcessError(
            f"Git command failed: git {' '.join(args)}\n{stderr}".rstrip(),
            command=command,
            stderr=stderr,
        ) from e
    except FileNotFoundError as exc:
        raise ProcessError(
            "Git command not found. Please install Git.", command=command
        ) from exc
    return result.stdout


def find_git_repo_root(start_path: Optional[PathLike] = None) -> Optional[Path]:
    """Resolve the repository that contains ``start_path`` (default: cwd).

    Asks git for the work tree top level so worktrees and submodules
    resolve correctly; when git is unavailable or refuses, the nearest
    ancestor holding a ``.git`` entry wins. ``None`` means no repository.
    """
    start = Path(start_path or Path.cwd()).expanduser().resolve(strict=False)
    if start.is_file():
        start = start.parent

    try:
        top = _run_git_command(start, ["rev-parse", "--show-toplevel"]).strip()
    except ProcessError as exc:
        logger.debug("rev-parse failed in %s: %s", start, exc)
        top = ""
    if top:
        return Path(top)

    return next(
        (d for d in (start, *start.parents) if (d / ".git").exists()), None
    )


def read_staged_diff(project_root: PathLike) -> str:
    """Return the staged diff (``git diff --staged``) as opaque text."""
    return _run_git_command(project_root, ["diff", "--staged"])


def read_recent_subjects(
    project_root: PathLike, count: int = DEFAULT_HISTORY_COUNT
) -> str:
    """Return the last ``count`` commit subjects, newest first, one per line."""
    try:
        return _run_git_command(
            project_root, ["log", "-n", str(count), "--pretty=format:%s"]
        )
    except ProcessError as exc:
        if any(marker in exc.stderr for marker in _UNBORN_BRANCH_MARKERS):
            logger.debug("No commits yet in %s", project_root)
            return ""
        raise


class GitRepo:
    """Git queries bound to one repository root."""

    def __init__(self, repo_path: PathLike) -> None:
        self.repo_path = Path(repo_path)

    def get_staged_diff(self) -> str:
        return read_staged_diff(self.repo_path)

    def get_recent_subjects(
        self, count: int = DEFAULT_HISTORY_COUNT
    ) -> list[str]:
        """Recent commit subjects as a list, blank lines dropped."""
        output = read_recent_subjects(self.repo_path, count)
        return [line for line in output.splitlines() if line.strip()]
