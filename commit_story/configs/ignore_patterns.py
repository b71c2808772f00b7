"""
Commit Story Ignore Patterns

Loading and matching of the repository-local exclusion list.
Follows .gitignore-style format: one pattern per line, '#' comments.
"""

import fnmatch
from pathlib import Path

IGNORE_FILE_NAME = ".commit-story-ignore"


def _load_ignore_file(path: Path) -> set[str]:
    """Load patterns from an ignore file (like .gitignore format)."""
    if not path.exists():
        return set()
    patterns = set()
    for line in path.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.add(line)
    return patterns


def load_ignore_patterns(repo_path: str) -> list[str]:
    """Load exclusion patterns from <repo>/.commit-story-ignore.

    Args:
        repo_path: Root path of the repository

    Returns:
        Sorted list of patterns (empty if the file is absent)
    """
    return sorted(_load_ignore_file(Path(repo_path) / IGNORE_FILE_NAME))


def matches_ignore_pattern(rel_path: str, patterns: list[str] | tuple[str, ...]) -> bool:
    """Check a repository-relative path against gitignore-style patterns.

    A pattern matches the full relative path, the file name, or (for
    directory patterns like 'journal/') anything beneath that directory.
    """
    if rel_path.startswith("./"):
        rel_path = rel_path[2:]
    filename = rel_path.rsplit("/", 1)[-1]
    for pattern in patterns:
        anchored = pattern.lstrip("/")
        if anchored.endswith("/"):
            directory = anchored.rstrip("/")
            if rel_path.startswith(directory + "/") or fnmatch.fnmatch(rel_path, anchored + "*"):
                return True
            continue
        if fnmatch.fnmatch(rel_path, anchored) or fnmatch.fnmatch(filename, anchored):
            return True
        if rel_path.startswith(anchored + "/"):
            return True
    return False
