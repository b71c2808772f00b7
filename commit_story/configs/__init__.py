"""
Commit Story Configuration Module

Re-exports commonly used functions for cleaner imports across the codebase.
"""

# Logging (most commonly used)
from commit_story.configs.logging import get_logger, setup_logging

# Paths
from commit_story.configs.paths import (
    encode_project_path,
    ensure_data_dir,
    get_claude_projects_path,
    get_data_path,
    get_transcript_dir,
)

# Constants
from commit_story.configs.constants import (
    CHARS_PER_TOKEN,
    COMPACTION_MARKER,
    TIMEOUTS,
    get_timeout,
)

# Ignore patterns
from commit_story.configs.ignore_patterns import (
    IGNORE_FILE_NAME,
    load_ignore_patterns,
    matches_ignore_pattern,
)

# YAML config
from commit_story.configs.yaml_config import (
    DEFAULT_CONFIG_YAML,
    create_default_config,
    get_config_path,
    load_yaml_config,
)

# Runtime
from commit_story.configs.runtime import FilterConfig, load_filter_config

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # Paths
    "encode_project_path",
    "ensure_data_dir",
    "get_claude_projects_path",
    "get_data_path",
    "get_transcript_dir",
    # Constants
    "CHARS_PER_TOKEN",
    "COMPACTION_MARKER",
    "TIMEOUTS",
    "get_timeout",
    # Ignore patterns
    "IGNORE_FILE_NAME",
    "load_ignore_patterns",
    "matches_ignore_pattern",
    # YAML config
    "DEFAULT_CONFIG_YAML",
    "create_default_config",
    "get_config_path",
    "load_yaml_config",
    # Runtime
    "FilterConfig",
    "load_filter_config",
]
