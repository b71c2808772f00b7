"""
Diff Utilities

Splitting a unified diff into per-file sections, dropping excluded files,
and truncating with a per-file change summary.
"""

import re
from dataclasses import dataclass

from commit_story.configs import matches_ignore_pattern

_DIFF_HEADER = re.compile(r"^diff --git a/(.+?) b/(.+)$")


@dataclass(frozen=True)
class DiffSection:
    """One file's portion of a unified diff."""

    path: str
    old_path: str
    text: str

    @property
    def added(self) -> int:
        return sum(
            1 for line in self.text.splitlines()
            if line.startswith("+") and not line.startswith("+++")
        )

    @property
    def removed(self) -> int:
        return sum(
            1 for line in self.text.splitlines()
            if line.startswith("-") and not line.startswith("---")
        )


def split_diff(diff: str) -> tuple[str, list[DiffSection]]:
    """
    Split a diff into its preamble and per-file sections.

    Returns:
        (text before the first `diff --git` header, sections in diff order)
    """
    preamble: list[str] = []
    sections: list[DiffSection] = []
    current: list[str] = []
    paths: tuple[str, str] | None = None

    for line in diff.splitlines(keepends=True):
        match = _DIFF_HEADER.match(line.rstrip("\n"))
        if match:
            if paths is not None:
                sections.append(DiffSection(path=paths[1], old_path=paths[0], text="".join(current)))
            paths = (match.group(1), match.group(2))
            current = [line]
        elif paths is None:
            preamble.append(line)
        else:
            current.append(line)

    if paths is not None:
        sections.append(DiffSection(path=paths[1], old_path=paths[0], text="".join(current)))

    return "".join(preamble), sections


def exclude_diff_paths(diff: str, patterns: list[str] | tuple[str, ...]) -> tuple[str, list[str]]:
    """
    Remove the sections of excluded files from a diff.

    A section is excluded when its new or old path matches a pattern.

    Returns:
        (filtered diff, excluded paths in diff order)
    """
    if not patterns or not diff:
        return diff, []

    preamble, sections = split_diff(diff)
    kept = []
    excluded = []
    for section in sections:
        if matches_ignore_pattern(section.path, patterns) or matches_ignore_pattern(section.old_path, patterns):
            excluded.append(section.path)
        else:
            kept.append(section.text)

    if not excluded:
        return diff, []
    return preamble + "".join(kept), excluded


def summarize_changes(diff: str) -> str:
    """Per-file change summary, one `path  +added -removed` line per file."""
    _, sections = split_diff(diff)
    return "\n".join(f"{s.path}  +{s.added} -{s.removed}" for s in sections)


def truncate_diff(diff: str, line_limit: int) -> str:
    """
    Keep the first `line_limit` lines of a diff plus a summary of every file.

    Never returns something longer than the input.
    """
    lines = diff.splitlines(keepends=True)
    if len(lines) <= line_limit:
        return diff

    head = "".join(lines[:line_limit])
    if head and not head.endswith("\n"):
        head += "\n"
    summary = summarize_changes(diff)
    truncated = (
        f"{head}[... diff truncated: showing {line_limit} of {len(lines)} lines ...]\n"
        f"Changed files:\n{summary}\n"
    )
    if len(truncated) >= len(diff):
        return diff
    return truncated
