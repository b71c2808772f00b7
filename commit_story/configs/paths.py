"""
Commit Story Data Paths

Locations of the commit-story data directory and of the Claude Code
transcript storage it reads from.
"""

import os
import re
from pathlib import Path

DEFAULT_DATA_PATH = Path.home() / ".commit-story"
DEFAULT_CLAUDE_PROJECTS_PATH = Path.home() / ".claude" / "projects"


def get_data_path() -> Path:
    """Get the commit-story data directory path."""
    data_path = os.environ.get("COMMIT_STORY_DATA_PATH")
    if data_path:
        return Path(data_path).expanduser()
    return DEFAULT_DATA_PATH


def ensure_data_dir() -> Path:
    """Ensure ~/.commit-story exists.

    Returns:
        Path to data directory
    """
    data_path = get_data_path()
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path


def get_claude_projects_path() -> Path:
    """Get the root of Claude Code's per-project transcript directories.

    Override with COMMIT_STORY_CLAUDE_PROJECTS (useful for tests and for
    non-default Claude Code installs).
    """
    env_path = os.environ.get("COMMIT_STORY_CLAUDE_PROJECTS")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CLAUDE_PROJECTS_PATH


def encode_project_path(repo_path: str) -> str:
    """Convert an absolute repository path to Claude Code's directory name.

    Claude Code replaces every character that is not a letter or digit
    with '-', e.g. '/home/me/my_app' -> '-home-me-my-app'.
    """
    return re.sub(r"[^A-Za-z0-9]", "-", repo_path.rstrip("/") or "/")


def get_transcript_dir(repo_path: str, projects_root: Path | None = None) -> Path:
    """Get the transcript directory for a repository."""
    root = projects_root if projects_root is not None else get_claude_projects_path()
    return root / encode_project_path(repo_path)
