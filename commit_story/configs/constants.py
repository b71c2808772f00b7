"""
Commit Story Constants

Static configuration values that rarely change: timeouts, token estimation
and the defaults of the reduction tiers.
"""

# --- Timeout Configuration ---
# Centralized timeout values (in seconds)

TIMEOUTS = {
    # Git operations
    "git_command": 10,  # Default git command timeout
    "git_diff": 30,  # git diff-tree on large commits
}

# --- Token Estimation ---

CHARS_PER_TOKEN = 4  # Cheap proxy, not a tokenizer

# --- Context Defaults ---

DEFAULT_TOKEN_BUDGET = 20_000
DEFAULT_MIN_SIGNAL_CHARS = 2  # Drops single-character acknowledgements
DEFAULT_SHORT_RECORD_CHARS = 80  # Tier 2 threshold
DEFAULT_DIFF_LINE_LIMIT = 400  # Tier 1 threshold
DEFAULT_TIER3_KEEP = 25  # Records kept at each end of the window in tier 3
DEFAULT_BUFFER_SECONDS = 60  # Clock skew tolerance on both window edges
DEFAULT_FALLBACK_WINDOW_HOURS = 24  # Window length for a repository's first commit
DEFAULT_MAX_WORKERS = 4  # Parallel transcript file reads

# --- Transcript Markers ---

COMPACTION_MARKER = "This session is being continued from a previous conversation"

# Documentation files, for commit content analysis
DOC_EXTENSIONS = (".md", ".txt")
DOC_NAME_MARKERS = ("README", "CHANGELOG")


def get_timeout(key: str, default: int | float | None = None) -> int | float:
    """
    Get a timeout value by key.

    Args:
        key: Timeout key from TIMEOUTS dict
        default: Default value if key not found

    Returns:
        Timeout value in seconds
    """
    if default is None:
        default = TIMEOUTS["git_command"]
    return TIMEOUTS.get(key, default)
