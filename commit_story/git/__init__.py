"""
Commit Story Git Integration

Read-only commit metadata and diff retrieval.
"""

from commit_story.git.commits import (
    CommitReader,
    get_repo_root,
    is_git_repo,
    read_commit,
    read_previous_commit,
)

__all__ = [
    "CommitReader",
    "get_repo_root",
    "is_git_repo",
    "read_commit",
    "read_previous_commit",
]
