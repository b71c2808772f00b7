"""
Commit Reader

Reads commit metadata and diffs through read-only git plumbing commands.
A reference that does not resolve is a configuration error and is raised
immediately; there is nothing to correlate without a commit.
"""

import os
from datetime import datetime, timezone
from typing import Optional

from commit_story.configs import get_logger, get_timeout
from commit_story.exceptions import CommitNotFoundError, NotAGitRepoError
from commit_story.git.subprocess_utils import git_check, git_single_line, git_stdout
from commit_story.models import Author, Commit

logger = get_logger("git.commits")

# hash, author name, author email, author date (strict ISO 8601), raw body
_SHOW_FORMAT = "%H%x00%an%x00%ae%x00%aI%x00%B"


def is_git_repo(path: str) -> bool:
    """
    Check if the given path is inside a git repository.

    Args:
        path: Directory path to check

    Returns:
        True if path is in a git repository
    """
    if not os.path.isdir(path):
        return False
    return git_check(["rev-parse", "--git-dir"], path, timeout=5)


def get_repo_root(path: str) -> Optional[str]:
    """Get the top-level directory of the repository containing `path`."""
    if not os.path.isdir(path):
        return None
    return git_single_line(["rev-parse", "--show-toplevel"], path)


def _resolve(repo_path: str, ref: str) -> Optional[str]:
    return git_single_line(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], repo_path)


def _parse_show_output(output: str, ref: str, repo_path: str) -> tuple[str, Author, datetime, str]:
    parts = output.split("\x00", 4)
    if len(parts) != 5:
        raise CommitNotFoundError(ref, repo_path)
    commit_hash, name, email, date, body = parts
    timestamp = datetime.fromisoformat(date.strip())
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return commit_hash.strip(), Author(name=name, email=email), timestamp, body.strip()


def read_commit(repo_path: str, ref: str = "HEAD") -> Commit:
    """
    Read a commit's metadata and full diff.

    Args:
        repo_path: Repository path
        ref: Commit reference (HEAD, HEAD~1, branch, hash, ...)

    Returns:
        Commit with message, author, zoned timestamp and raw diff

    Raises:
        NotAGitRepoError: If repo_path is not inside a git repository
        CommitNotFoundError: If ref does not resolve to a commit
        GitCommandError: If git cannot be run
    """
    if not is_git_repo(repo_path):
        raise NotAGitRepoError(f"Not a git repository: {repo_path}")

    commit_hash = _resolve(repo_path, ref)
    if not commit_hash:
        raise CommitNotFoundError(ref, repo_path)

    output = git_stdout(["show", "--no-patch", f"--format={_SHOW_FORMAT}", commit_hash], repo_path)
    commit_hash, author, timestamp, message = _parse_show_output(output, ref, repo_path)

    # --root so a repository's first commit still shows its additions
    diff = git_stdout(
        ["diff-tree", "-p", "--root", "--no-commit-id", "--no-color", commit_hash],
        repo_path,
        timeout=int(get_timeout("git_diff")),
    )

    logger.debug(
        f"Read commit {commit_hash[:7]} ({ref}): {len(diff)} diff chars, "
        f"{len(diff.splitlines())} diff lines"
    )

    return Commit(
        hash=commit_hash,
        ref=ref,
        message=message,
        diff=diff,
        author=author,
        timestamp=timestamp,
        repository_path=repo_path,
    )


def read_previous_commit(repo_path: str, ref: str = "HEAD") -> Optional[Commit]:
    """
    Read the first parent of `ref`.

    Args:
        repo_path: Repository path
        ref: Commit reference whose parent is wanted

    Returns:
        Parent Commit, or None for a repository's first commit

    Raises:
        NotAGitRepoError: If repo_path is not inside a git repository
        CommitNotFoundError: If ref itself does not resolve
    """
    if not is_git_repo(repo_path):
        raise NotAGitRepoError(f"Not a git repository: {repo_path}")
    if not _resolve(repo_path, ref):
        raise CommitNotFoundError(ref, repo_path)

    parent_ref = f"{ref}~1"
    if not _resolve(repo_path, parent_ref):
        logger.debug(f"{ref} has no parent - first commit in repository")
        return None
    return read_commit(repo_path, parent_ref)


class CommitReader:
    """Commit reads bound to one repository."""

    def __init__(self, repo_path: str):
        self.repo_path = repo_path

    def read_commit(self, ref: str = "HEAD") -> Commit:
        return read_commit(self.repo_path, ref)

    def read_previous_commit(self, ref: str = "HEAD") -> Optional[Commit]:
        return read_previous_commit(self.repo_path, ref)
