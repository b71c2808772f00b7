"""
Session Resolution

Chooses which overlapping transcript sessions describe a commit.
"""

from commit_story.sessions.resolver import (
    RelevanceSelector,
    SessionResolver,
    find_concurrent,
    find_continuations,
    interleave,
    merge_continuations,
    resolve,
)

__all__ = [
    "RelevanceSelector",
    "SessionResolver",
    "find_concurrent",
    "find_continuations",
    "interleave",
    "merge_continuations",
    "resolve",
]
