"""
Git Command Runner

The commit reader only ever talks to git through these helpers. Each one
runs `git <args>` in the repository with a timeout and turns a missing
binary, a bad working directory or a hung command into GitCommandError.
"""

import subprocess
from typing import Optional

from commit_story.configs import get_logger, get_timeout
from commit_story.exceptions import GitCommandError

logger = get_logger("git.subprocess")

__all__ = ["GitCommandError", "run_git_command", "git_stdout", "git_single_line", "git_check"]

GIT_TIMEOUT = int(get_timeout("git_command", 10))


def run_git_command(
    args: list[str],
    cwd: str,
    timeout: int | None = None,
) -> tuple[int, str, str]:
    """
    Run git in `cwd` and hand back (returncode, stdout, stderr).

    A non-zero exit is returned, not raised; callers decide what it means.
    Output is decoded as UTF-8 with replacement so binary diffs never fail
    the hook.

    Raises:
        GitCommandError: When git cannot be started or runs past `timeout`
    """
    command = ["git"] + args
    if timeout is None:
        timeout = GIT_TIMEOUT
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError:
        raise GitCommandError("git not found in PATH (or repository path missing)", command=command)
    except NotADirectoryError:
        raise GitCommandError(f"Repository path is not a directory: {cwd}", command=command)
    except subprocess.TimeoutExpired:
        raise GitCommandError(f"git {args[0]} gave no answer within {timeout}s", command=command)
    return result.returncode, result.stdout, result.stderr


def git_stdout(
    args: list[str],
    cwd: str,
    timeout: int | None = None,
) -> str:
    """Stdout of a git command that must succeed (commit metadata, diffs)."""
    returncode, stdout, stderr = run_git_command(args, cwd, timeout)
    if returncode != 0:
        raise GitCommandError(
            f"git {args[0]} failed",
            command=["git"] + args,
            returncode=returncode,
            stderr=stderr.strip(),
        )
    return stdout


def git_check(
    args: list[str],
    cwd: str,
    timeout: int | None = None,
) -> bool:
    """Whether a git check such as `rev-parse --git-dir` exits cleanly."""
    try:
        return run_git_command(args, cwd, timeout)[0] == 0
    except GitCommandError:
        return False


def git_single_line(
    args: list[str],
    cwd: str,
    timeout: int = 5,
) -> Optional[str]:
    """
    Stripped stdout of a one-value git query, such as a resolved ref or the
    repository root. None when git fails, so a missing parent commit is not
    an error.
    """
    try:
        returncode, stdout, _ = run_git_command(args, cwd, timeout)
    except GitCommandError as e:
        logger.debug(f"git {args[0]} unavailable: {e}")
        return None
    if returncode != 0:
        return None
    return stdout.strip()
