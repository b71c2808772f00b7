"""
Commit Story Exception Hierarchy

Centralized exception classes for structured error handling across the codebase.
All commit-story exceptions inherit from CommitStoryError.

Usage:
    from commit_story.exceptions import CommitNotFoundError, GitError

    try:
        commit = read_commit(repo_path, "HEAD")
    except CommitNotFoundError as e:
        logger.error(f"Cannot correlate: {e}")
"""


class CommitStoryError(Exception):
    """Base exception for all commit-story errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(CommitStoryError):
    """Error in commit-story configuration."""

    pass


# =============================================================================
# Git Errors
# =============================================================================


class GitError(CommitStoryError):
    """Base class for git-related errors."""

    pass


class GitCommandError(GitError):
    """Git command failed to execute."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str | None = None,
    ):
        details = {}
        if command:
            details["command"] = " ".join(command)
        if returncode is not None:
            details["returncode"] = returncode
        if stderr:
            details["stderr"] = stderr
        super().__init__(message, details)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class NotAGitRepoError(GitError):
    """Path is not a git repository."""

    pass


class CommitNotFoundError(GitError):
    """Commit reference does not resolve to a commit."""

    def __init__(self, ref: str, repo_path: str):
        super().__init__(
            f"Commit reference not found: {ref}",
            {"repo_path": repo_path},
        )
        self.ref = ref
        self.repo_path = repo_path


# =============================================================================
# Transcript Errors
# =============================================================================


class TranscriptError(CommitStoryError):
    """Base class for transcript collection errors."""

    pass


class TranscriptParseError(TranscriptError):
    """A transcript line is not a well-formed record."""

    def __init__(self, message: str, line_number: int | None = None):
        details = {"line": line_number} if line_number is not None else {}
        super().__init__(message, details)
        self.line_number = line_number
