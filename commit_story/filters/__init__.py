"""
Context Filters

Noise classification, path exclusion, redaction and token budgeting.
"""

from commit_story.filters.budget import (
    MAX_TIER,
    cap_records,
    drop_short_records,
    estimate_context_tokens,
)
from commit_story.filters.context import (
    ContextFilter,
    classify_record,
    filter_context,
    is_excluded_record,
)
from commit_story.filters.diff import (
    DiffSection,
    exclude_diff_paths,
    split_diff,
    summarize_changes,
    truncate_diff,
)

__all__ = [
    # Budget
    "MAX_TIER",
    "cap_records",
    "drop_short_records",
    "estimate_context_tokens",
    # Context
    "ContextFilter",
    "classify_record",
    "filter_context",
    "is_excluded_record",
    # Diff
    "DiffSection",
    "exclude_diff_paths",
    "split_diff",
    "summarize_changes",
    "truncate_diff",
]
